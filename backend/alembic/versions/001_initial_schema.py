"""Initial schema: users, events, ticket types, tickets, transactions, notifications.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'attendee'")),
        sa.Column("wallet_address", sa.String(100), nullable=True, unique=True),
        sa.Column("bio", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("role IN ('host', 'attendee')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("host_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(5000), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'draft'")),
        sa.Column("network", sa.String(50), nullable=False, server_default=sa.text("'sepolia'")),
        sa.Column("contract_address", sa.String(100), nullable=True),
        sa.Column("total_tickets", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("sold_tickets", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("views", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("favorites", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('draft', 'published', 'ongoing', 'completed', 'cancelled')",
            name="check_event_status",
        ),
        sa.CheckConstraint("sold_tickets <= total_tickets", name="check_event_sold_lte_total"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_host_id", "events", ["host_id"])
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_city_category", "events", ["city", "category"])

    op.create_table(
        "ticket_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("sold", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("benefits", sa.JSON(), nullable=False),
        sa.UniqueConstraint("event_id", "name", name="uq_ticket_type_event_name"),
        sa.CheckConstraint("price >= 0", name="check_ticket_type_price_non_negative"),
        sa.CheckConstraint("quantity >= 0", name="check_ticket_type_quantity_non_negative"),
        sa.CheckConstraint("sold >= 0", name="check_ticket_type_sold_non_negative"),
        # The oversell guard of last resort
        sa.CheckConstraint("sold <= quantity", name="check_ticket_type_sold_lte_quantity"),
    )
    op.create_index("ix_ticket_types_id", "ticket_types", ["id"])
    op.create_index("ix_ticket_types_event_id", "ticket_types", ["event_id"])

    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("ticket_type_id", sa.Integer(), sa.ForeignKey("ticket_types.id"), nullable=False),
        sa.Column("ticket_type_name", sa.String(100), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("qr_code", sa.String(128), nullable=False, unique=True),
        sa.Column("token_id", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("used_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("transaction_hash", sa.String(128), nullable=False),
        sa.Column("contract_address", sa.String(100), nullable=True),
        sa.Column("network", sa.String(50), nullable=False, server_default=sa.text("'sepolia'")),
        sa.Column("transferred_from_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="check_ticket_quantity_positive"),
        sa.CheckConstraint(
            "status IN ('active', 'used', 'transferred', 'cancelled')",
            name="check_ticket_status",
        ),
    )
    op.create_index("ix_tickets_id", "tickets", ["id"])
    op.create_index("ix_tickets_owner_status", "tickets", ["owner_id", "status"])
    op.create_index("ix_tickets_event_status", "tickets", ["event_id", "status"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=True),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(10), nullable=False, server_default=sa.text("'ETH'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default=sa.text("'crypto'")),
        # Idempotency key for purchases
        sa.Column("transaction_hash", sa.String(128), nullable=False, unique=True),
        sa.Column("block_number", sa.Integer(), nullable=True),
        sa.Column("network", sa.String(50), nullable=False, server_default=sa.text("'sepolia'")),
        sa.Column("wallet_address", sa.String(100), nullable=True),
        sa.Column("error_message", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount >= 0", name="check_transaction_amount_non_negative"),
        sa.CheckConstraint("type IN ('purchase', 'refund', 'transfer')", name="check_transaction_type"),
        sa.CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="check_transaction_status",
        ),
        sa.CheckConstraint(
            "payment_method IN ('crypto', 'card', 'other')",
            name="check_transaction_payment_method",
        ),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index("ix_transactions_event_id", "transactions", ["event_id"])
    op.create_index("ix_transactions_user_status", "transactions", ["user_id", "status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.String(1000), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("data", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('event', 'ticket', 'transaction', 'system')",
            name="check_notification_type",
        ),
    )
    op.create_index("ix_notifications_id", "notifications", ["id"])
    op.create_index(
        "ix_notifications_user_read_created", "notifications", ["user_id", "read", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("transactions")
    op.drop_table("tickets")
    op.drop_table("ticket_types")
    op.drop_table("events")
    op.drop_table("users")
