"""Create receipt, group and notification tables."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_create_receipt_tables"
down_revision = None
branch_labels = None
depends_on = None


notification_type_enum = sa.Enum(
    "participant_request",
    "participant_approved",
    "participant_rejected",
    "deletion_request",
    "deletion_approved",
    "deletion_rejected",
    "receipt_closed",
    "item_added",
    "creator_transferred",
    "creator_transferred_from",
    name="notification_type",
)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    """Apply schema upgrades."""

    op.create_table(
        "receipts",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("creator_id", sa.String(64), nullable=False),
        sa.Column("invite_code", sa.String(12), nullable=False),
        sa.Column("service_charge_percent", sa.Numeric(5, 2), nullable=False),
        sa.Column("cover", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "is_closed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "service_charge_percent >= 0 AND service_charge_percent <= 100",
            name="ck_receipts_service_charge_percent_range",
        ),
        sa.CheckConstraint("cover >= 0", name="ck_receipts_cover_non_negative"),
        sa.UniqueConstraint("invite_code", name="uq_receipts_invite_code"),
    )
    op.create_index("ix_receipts_creator_id", "receipts", ["creator_id"])

    op.create_table(
        "participants",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column(
            "receipt_id",
            sa.String(36),
            sa.ForeignKey("receipts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("group_id", sa.String(36), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "is_closed", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_participants_receipt_id", "participants", ["receipt_id"])
    op.create_index("ix_participants_user_id", "participants", ["user_id"])

    op.create_table(
        "receipt_items",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column(
            "receipt_id",
            sa.String(36),
            sa.ForeignKey("receipts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "participant_id",
            sa.String(36),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 3), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_receipt_items_quantity_positive"),
        sa.CheckConstraint(
            "price >= 0", name="ck_receipt_items_price_non_negative"
        ),
    )

    op.create_table(
        "pending_participants",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column(
            "receipt_id",
            sa.String(36),
            sa.ForeignKey("receipts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "receipt_id",
            "user_id",
            name="uq_pending_participants_receipt_user",
        ),
    )

    op.create_table(
        "deletion_requests",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column(
            "receipt_id",
            sa.String(36),
            sa.ForeignKey("receipts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "item_id",
            sa.String(36),
            sa.ForeignKey("receipt_items.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "participant_id",
            sa.String(36),
            sa.ForeignKey("participants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("item_id", name="uq_deletion_requests_item_id"),
    )

    op.create_table(
        "groups",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("owner_user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("ix_groups_owner_user_id", "groups", ["owner_user_id"])

    op.create_table(
        "group_members",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column(
            "group_id",
            sa.String(36),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("type", notification_type_enum, nullable=False),
        sa.Column("title", sa.String(160), nullable=False),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("receipt_id", sa.String(36), nullable=True),
        sa.Column("related_user_id", sa.String(64), nullable=True),
        sa.Column(
            "is_read", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        _timestamp("created_at"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    """Revert schema upgrades."""

    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("group_members")
    op.drop_index("ix_groups_owner_user_id", table_name="groups")
    op.drop_table("groups")
    op.drop_table("deletion_requests")
    op.drop_table("pending_participants")
    op.drop_table("receipt_items")
    op.drop_index("ix_participants_user_id", table_name="participants")
    op.drop_index("ix_participants_receipt_id", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_receipts_creator_id", table_name="receipts")
    op.drop_table("receipts")
    notification_type_enum.drop(op.get_bind(), checkfirst=True)
