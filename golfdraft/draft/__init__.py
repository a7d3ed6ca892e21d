"""Snake draft ordering and turn resolution."""

from .order import generate_draft_order, seeded_draft_order, shuffled_order
from .turns import DRAFT_ROUNDS, next_position, position_for_pick, round_for_pick, total_picks

__all__ = [
    "DRAFT_ROUNDS",
    "generate_draft_order",
    "next_position",
    "position_for_pick",
    "round_for_pick",
    "seeded_draft_order",
    "shuffled_order",
    "total_picks",
]
