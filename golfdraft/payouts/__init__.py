"""Money owed between participants once a competition is decided."""

from .bounty import BOUNTY_TIER_AMOUNT, BountyResult, DraftedGolfer, calculate_bounty, load_bounty
from .payments import Payment, calculate_main_payments, net_bounty, net_by_user, net_main

__all__ = [
    "BOUNTY_TIER_AMOUNT",
    "BountyResult",
    "DraftedGolfer",
    "Payment",
    "calculate_bounty",
    "calculate_main_payments",
    "load_bounty",
    "net_bounty",
    "net_by_user",
    "net_main",
]
