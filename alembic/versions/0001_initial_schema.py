"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-03-02 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
TS = sa.DateTime(timezone=True)
MONEY = sa.Numeric(10, 2)


def _id() -> sa.Column:
    return sa.Column("id", ID, autoincrement=True, nullable=False)


def _fk(column: str, table: str, source: str, nullable: bool = False) -> list:
    return [
        sa.Column(column, ID, nullable=nullable),
        sa.ForeignKeyConstraint(
            [column],
            [f"{table}.id"],
            name=op.f(f"fk_{source}_{column}_{table}"),
            ondelete="CASCADE",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column("team_color", sa.String(length=20), nullable=True),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("username", name=op.f("uq_users_username")),
    )

    op.create_table(
        "golfers",
        _id(),
        sa.Column("external_id", sa.String(length=64), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("country", sa.String(length=64), nullable=True),
        sa.Column("world_ranking", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_golfers")),
        sa.UniqueConstraint("external_id", name=op.f("uq_golfers_external_id")),
    )

    op.create_table(
        "tournaments",
        _id(),
        sa.Column("external_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", TS, nullable=False),
        sa.Column("end_date", TS, nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.CheckConstraint(
            "status IN ('upcoming','active','completed')",
            name=op.f("ck_tournaments_status_enum"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tournaments")),
        sa.UniqueConstraint("external_id", name=op.f("uq_tournaments_external_id")),
    )
    op.create_index("ix_tournaments_dates", "tournaments", ["start_date", "end_date"])

    op.create_table(
        "tournament_results",
        _id(),
        *_fk("tournament_id", "tournaments", "tournament_results"),
        *_fk("golfer_id", "golfers", "tournament_results"),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("total_strokes", sa.Integer(), nullable=True),
        sa.Column("total_to_par", sa.Integer(), nullable=True),
        sa.Column("rounds_to_par", sa.JSON(), nullable=True),
        sa.Column("made_cut", sa.Boolean(), nullable=True),
        sa.Column("withdrew", sa.Boolean(), nullable=False),
        sa.Column("manual_override", sa.Boolean(), nullable=False),
        sa.Column("last_updated", TS, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tournament_results")),
        sa.UniqueConstraint(
            "tournament_id", "golfer_id", name=op.f("uq_tournament_results_tournament_id_golfer_id")
        ),
    )
    op.create_index(
        op.f("ix_tournament_results_tournament_id"), "tournament_results", ["tournament_id"]
    )
    op.create_index(op.f("ix_tournament_results_golfer_id"), "tournament_results", ["golfer_id"])
    op.create_index(
        "ix_tournament_results_position", "tournament_results", ["tournament_id", "position"]
    )

    op.create_table(
        "competitions",
        _id(),
        *_fk("tournament_id", "tournaments", "competitions"),
        sa.Column("name", sa.String(length=200), nullable=False),
        *_fk("created_by_id", "users", "competitions"),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("invite_code", sa.String(length=16), nullable=True),
        sa.Column("invite_expires_at", TS, nullable=True),
        sa.Column("draft_scheduled_at", TS, nullable=True),
        sa.Column("draft_status", sa.String(length=20), nullable=False),
        sa.Column("draft_started_at", TS, nullable=True),
        sa.Column("draft_completed_at", TS, nullable=True),
        sa.Column("finalized_at", TS, nullable=True),
        sa.Column("created_at", TS, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.CheckConstraint(
            "draft_status IN ('not_started','in_progress','completed')",
            name=op.f("ck_competitions_draft_status_enum"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_competitions")),
        sa.UniqueConstraint("invite_code", name=op.f("uq_competitions_invite_code")),
    )
    op.create_index(op.f("ix_competitions_tournament_id"), "competitions", ["tournament_id"])
    op.create_index(op.f("ix_competitions_created_by_id"), "competitions", ["created_by_id"])
    op.create_index(op.f("ix_competitions_draft_status"), "competitions", ["draft_status"])
    op.create_index(
        "uq_competitions_one_public_per_tournament",
        "competitions",
        ["tournament_id"],
        unique=True,
        sqlite_where=sa.text("is_public = 1"),
        postgresql_where=sa.text("is_public = true"),
    )

    op.create_table(
        "competition_participants",
        _id(),
        *_fk("competition_id", "competitions", "competition_participants"),
        *_fk("user_id", "users", "competition_participants"),
        sa.Column("joined_at", TS, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_competition_participants")),
        sa.UniqueConstraint(
            "competition_id",
            "user_id",
            name=op.f("uq_competition_participants_competition_id_user_id"),
        ),
    )
    op.create_index(
        op.f("ix_competition_participants_competition_id"),
        "competition_participants",
        ["competition_id"],
    )
    op.create_index(
        op.f("ix_competition_participants_user_id"), "competition_participants", ["user_id"]
    )

    op.create_table(
        "draft_order",
        _id(),
        *_fk("competition_id", "competitions", "draft_order"),
        *_fk("user_id", "users", "draft_order"),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.CheckConstraint("position >= 1", name=op.f("ck_draft_order_position_positive")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_draft_order")),
        sa.UniqueConstraint(
            "competition_id", "user_id", name=op.f("uq_draft_order_competition_id_user_id")
        ),
        sa.UniqueConstraint(
            "competition_id", "position", name=op.f("uq_draft_order_competition_id_position")
        ),
    )
    op.create_index(op.f("ix_draft_order_competition_id"), "draft_order", ["competition_id"])

    op.create_table(
        "draft_picks",
        _id(),
        *_fk("competition_id", "competitions", "draft_picks"),
        *_fk("user_id", "users", "draft_picks"),
        *_fk("golfer_id", "golfers", "draft_picks"),
        sa.Column("draft_round", sa.Integer(), nullable=False),
        sa.Column("pick_number", sa.Integer(), nullable=False),
        sa.Column("picked_at", TS, nullable=False),
        sa.CheckConstraint(
            "draft_round IN (1, 2, 3)", name=op.f("ck_draft_picks_draft_round_range")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_draft_picks")),
        sa.UniqueConstraint(
            "competition_id", "golfer_id", name=op.f("uq_draft_picks_competition_id_golfer_id")
        ),
        sa.UniqueConstraint(
            "competition_id",
            "pick_number",
            name=op.f("uq_draft_picks_competition_id_pick_number"),
        ),
    )
    op.create_index(op.f("ix_draft_picks_competition_id"), "draft_picks", ["competition_id"])
    op.create_index(op.f("ix_draft_picks_user_id"), "draft_picks", ["user_id"])

    op.create_table(
        "alternates",
        _id(),
        *_fk("competition_id", "competitions", "alternates"),
        *_fk("user_id", "users", "alternates"),
        *_fk("golfer_id", "golfers", "alternates"),
        sa.Column("selected_at", TS, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_alternates")),
        sa.UniqueConstraint(
            "competition_id", "user_id", name=op.f("uq_alternates_competition_id_user_id")
        ),
    )
    op.create_index(op.f("ix_alternates_competition_id"), "alternates", ["competition_id"])

    op.create_table(
        "competition_scores",
        _id(),
        *_fk("competition_id", "competitions", "competition_scores"),
        *_fk("user_id", "users", "competition_scores"),
        sa.Column("team_score_to_par", sa.Integer(), nullable=False),
        sa.Column("team_score_strokes", sa.Integer(), nullable=False),
        sa.Column("final_position", sa.Integer(), nullable=False),
        sa.Column("score_breakdown", sa.JSON(), nullable=True),
        sa.Column("season_year", sa.Integer(), nullable=False),
        sa.Column("won", sa.Boolean(), nullable=False),
        sa.Column("net_winnings", MONEY, nullable=False),
        sa.Column("net_bounties", MONEY, nullable=False),
        sa.Column("aggregate_applied", sa.Boolean(), nullable=False),
        sa.Column("calculated_at", TS, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_competition_scores")),
        sa.UniqueConstraint(
            "competition_id",
            "user_id",
            name=op.f("uq_competition_scores_competition_id_user_id"),
        ),
    )
    op.create_index(
        op.f("ix_competition_scores_competition_id"), "competition_scores", ["competition_id"]
    )
    op.create_index(op.f("ix_competition_scores_user_id"), "competition_scores", ["user_id"])
    op.create_index(
        "ix_competition_scores_position", "competition_scores", ["competition_id", "final_position"]
    )

    op.create_table(
        "competition_payments",
        _id(),
        *_fk("competition_id", "competitions", "competition_payments"),
        *_fk("from_user_id", "users", "competition_payments"),
        *_fk("to_user_id", "users", "competition_payments"),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("payment_type", sa.String(length=20), nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.CheckConstraint(
            "payment_type IN ('main','bounty')",
            name=op.f("ck_competition_payments_payment_type_enum"),
        ),
        sa.CheckConstraint("amount > 0", name=op.f("ck_competition_payments_amount_positive")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_competition_payments")),
        sa.UniqueConstraint(
            "competition_id",
            "from_user_id",
            "to_user_id",
            "payment_type",
            name=op.f(
                "uq_competition_payments_competition_id_from_user_id_to_user_id_payment_type"
            ),
        ),
    )
    op.create_index(
        op.f("ix_competition_payments_competition_id"), "competition_payments", ["competition_id"]
    )
    op.create_index(
        op.f("ix_competition_payments_from_user_id"), "competition_payments", ["from_user_id"]
    )
    op.create_index(
        op.f("ix_competition_payments_to_user_id"), "competition_payments", ["to_user_id"]
    )

    op.create_table(
        "competition_bounties",
        _id(),
        *_fk("competition_id", "competitions", "competition_bounties"),
        *_fk("user_id", "users", "competition_bounties"),
        *_fk("golfer_id", "golfers", "competition_bounties"),
        sa.Column("pick_round", sa.Integer(), nullable=False),
        sa.Column("bounty_amount", MONEY, nullable=False),
        sa.Column("created_at", TS, nullable=False),
        sa.CheckConstraint(
            "pick_round IN (1, 2, 3)", name=op.f("ck_competition_bounties_pick_round_range")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_competition_bounties")),
        sa.UniqueConstraint("competition_id", name=op.f("uq_competition_bounties_competition_id")),
    )
    op.create_index(op.f("ix_competition_bounties_user_id"), "competition_bounties", ["user_id"])

    op.create_table(
        "annual_leaderboard",
        _id(),
        *_fk("user_id", "users", "annual_leaderboard"),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("total_competitions", sa.Integer(), nullable=False),
        sa.Column("competitions_won", sa.Integer(), nullable=False),
        sa.Column("total_winnings", MONEY, nullable=False),
        sa.Column("total_bounties", MONEY, nullable=False),
        sa.Column("updated_at", TS, nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_annual_leaderboard")),
        sa.UniqueConstraint("user_id", "year", name=op.f("uq_annual_leaderboard_user_id_year")),
    )
    op.create_index(op.f("ix_annual_leaderboard_user_id"), "annual_leaderboard", ["user_id"])
    op.create_index("ix_annual_leaderboard_year", "annual_leaderboard", ["year"])


def downgrade() -> None:
    op.drop_table("annual_leaderboard")
    op.drop_table("competition_bounties")
    op.drop_table("competition_payments")
    op.drop_table("competition_scores")
    op.drop_table("alternates")
    op.drop_table("draft_picks")
    op.drop_table("draft_order")
    op.drop_table("competition_participants")
    op.drop_table("competitions")
    op.drop_table("tournament_results")
    op.drop_table("tournaments")
    op.drop_table("golfers")
    op.drop_table("users")
