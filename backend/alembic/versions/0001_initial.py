"""users, slots, swap_requests

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

SLOT_STATUSES = ("BUSY", "SWAPPABLE", "SWAP_PENDING")
SWAP_STATUSES = ("PENDING", "ACCEPTED", "REJECTED")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*SLOT_STATUSES, name="slot_status", native_enum=False),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_slots_owner_id", "slots", ["owner_id"])
    op.create_index("ix_slots_time_range", "slots", ["start_time", "end_time"])

    op.create_table(
        "swap_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("my_slot_id", sa.Integer(), sa.ForeignKey("slots.id", ondelete="SET NULL")),
        sa.Column("their_slot_id", sa.Integer(), sa.ForeignKey("slots.id", ondelete="SET NULL")),
        sa.Column("requester_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("responder_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*SWAP_STATUSES, name="swap_status", native_enum=False),
            nullable=False,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("resolved_at", sa.DateTime()),
    )
    op.create_index("ix_swap_requests_my_slot_id", "swap_requests", ["my_slot_id"])
    op.create_index("ix_swap_requests_their_slot_id", "swap_requests", ["their_slot_id"])
    op.create_index("ix_swap_requests_requester_id", "swap_requests", ["requester_id"])
    op.create_index("ix_swap_requests_responder_id", "swap_requests", ["responder_id"])


def downgrade():
    op.drop_table("swap_requests")
    op.drop_table("slots")
    op.drop_table("users")
