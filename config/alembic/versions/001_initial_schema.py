"""Initial schema: players, clubs, match candidates, review queue, audit log, config.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None

_APPROVED = "match_status IN ('auto_approved', 'manually_approved')"


def upgrade() -> None:
    op.create_table(
        "clubs_transfermarkt",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("logo_url", sa.String(), nullable=True),
    )

    op.create_table(
        "players_transfermarkt",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("club_id", sa.Integer(), sa.ForeignKey("clubs_transfermarkt.id"), nullable=True),
        sa.Column("transfermarkt_url", sa.String(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("nationality", sa.String(), nullable=True),
        sa.Column("main_position", sa.String(), nullable=True),
        sa.Column("picture_url", sa.String(), nullable=True),
        sa.Column("sofascore_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_players_transfermarkt_sofascore_id", "players_transfermarkt", ["sofascore_id"])

    op.create_table(
        "sofascore_players_staging",
        sa.Column("sofascore_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("current_team_name", sa.String(), nullable=True),
        sa.Column("profile_url", sa.String(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("nationality", sa.String(), nullable=True),
        sa.Column("position", sa.String(), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("imported_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "player_matching_candidates",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "tm_player_id",
            sa.Integer(),
            sa.ForeignKey("players_transfermarkt.id"),
            nullable=False,
        ),
        sa.Column("sf_player_id", sa.Integer(), nullable=False),
        sa.Column("name_match", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("dob_match", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("club_match", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("nationality_match", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position_match", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("name_similarity_score", sa.Float(), nullable=True),
        sa.Column("club_similarity_score", sa.Float(), nullable=True),
        sa.Column("overall_confidence", sa.Float(), nullable=False),
        sa.Column("match_status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("tm_player_id", "sf_player_id", name="uq_match_candidates_pair"),
        sa.CheckConstraint(
            "match_status IN ('auto_approved', 'manually_approved', 'rejected', 'pending')",
            name="valid_match_status",
        ),
        sa.CheckConstraint(
            "overall_confidence >= 0 AND overall_confidence <= 1",
            name="confidence_range",
        ),
    )
    # At most one approved row per Transfermarkt player
    op.create_index(
        "uq_match_candidates_one_approved",
        "player_matching_candidates",
        ["tm_player_id"],
        unique=True,
        postgresql_where=sa.text(_APPROVED),
        sqlite_where=sa.text(_APPROVED),
    )
    op.create_index(
        "ix_match_candidates_status_created",
        "player_matching_candidates",
        ["match_status", "created_at"],
    )

    op.create_table(
        "player_matching_review_queue",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "tm_player_id",
            sa.Integer(),
            sa.ForeignKey("players_transfermarkt.id"),
            nullable=True,
        ),
        sa.Column("candidate_1_id", sa.Integer(), nullable=True),
        sa.Column("candidate_1_confidence", sa.Float(), nullable=True),
        sa.Column("candidate_2_id", sa.Integer(), nullable=True),
        sa.Column("candidate_2_confidence", sa.Float(), nullable=True),
        sa.Column("candidate_3_id", sa.Integer(), nullable=True),
        sa.Column("candidate_3_confidence", sa.Float(), nullable=True),
        sa.Column("reviewed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("approved_sf_player_id", sa.Integer(), nullable=True),
        sa.Column("rejection_reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint(
            "candidate_2_confidence IS NULL OR candidate_1_confidence IS NULL "
            "OR candidate_1_confidence >= candidate_2_confidence",
            name="ranked_candidates_1_2",
        ),
        sa.CheckConstraint(
            "candidate_3_confidence IS NULL OR candidate_2_confidence IS NULL "
            "OR candidate_2_confidence >= candidate_3_confidence",
            name="ranked_candidates_2_3",
        ),
    )
    op.create_index(
        "ix_review_queue_reviewed_confidence",
        "player_matching_review_queue",
        ["reviewed", "candidate_1_confidence"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("action_type", sa.String(), nullable=False),
        sa.Column(
            "review_entry_id",
            sa.Integer(),
            sa.ForeignKey("player_matching_review_queue.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("tm_player_id", sa.Integer(), nullable=True),
        sa.Column("sf_player_id", sa.Integer(), nullable=True),
        sa.Column("operator", sa.String(), nullable=False, server_default="anonymous"),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_audit_log_review_entry_id", "audit_log", ["review_entry_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])

    op.create_table(
        "config_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("config_json", sa.JSON(), server_default="{}", nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_by",
            sa.String(100),
            server_default="system",
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("config_settings")
    op.drop_index("ix_audit_log_created_at")
    op.drop_index("ix_audit_log_review_entry_id")
    op.drop_table("audit_log")
    op.drop_index("ix_review_queue_reviewed_confidence")
    op.drop_table("player_matching_review_queue")
    op.drop_index("ix_match_candidates_status_created")
    op.drop_index("uq_match_candidates_one_approved")
    op.drop_table("player_matching_candidates")
    op.drop_table("sofascore_players_staging")
    op.drop_index("ix_players_transfermarkt_sofascore_id")
    op.drop_table("players_transfermarkt")
    op.drop_table("clubs_transfermarkt")
