"""Events, service bookings and the booking cost aggregate.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("event_time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("organizer_id", sa.Uuid(), nullable=False),
        sa.Column("organizer_name", sa.String(255), nullable=False),
        sa.Column("organizer_specification", sa.String(255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("attractions", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("features", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("is_livestream", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("livestream_url", sa.String(1024), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default=sa.text("'business'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'upcoming'")),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_visible_in_join_tab", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_visible_in_my_events", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("deleted_from_my_events_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_from_join_tab_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("thumbnail_url", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "category IN ('social', 'networking', 'business', 'workshop', 'conference')",
            name="check_event_category",
        ),
        sa.CheckConstraint(
            "status IN ('upcoming', 'ongoing', 'completed', 'cancelled')",
            name="check_event_status",
        ),
    )
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])
    # My Events listing: one organizer's visible rows, newest first
    op.create_index(
        "ix_events_organizer_visible", "events", ["organizer_id", "is_visible_in_my_events", "created_at"]
    )
    # Join tab listing: public rows ordered by date
    op.create_index("ix_events_public_date", "events", ["is_visible_in_join_tab", "is_published", "event_date"])

    op.create_table(
        "event_service_bookings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("event_id", sa.Uuid(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("provider_id", sa.String(255), nullable=False),
        sa.Column("provider_name", sa.String(255), nullable=False),
        sa.Column("provider_category", sa.String(100), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("base_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("booking_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity > 0", name="check_service_booking_quantity_positive"),
        sa.CheckConstraint(
            "booking_status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="check_service_booking_status",
        ),
    )
    op.create_index("ix_event_service_bookings_user_id", "event_service_bookings", ["user_id"])
    op.create_index(
        "ix_service_bookings_event_status", "event_service_bookings", ["event_id", "booking_status", "created_at"]
    )

    # Cancelled bookings do not count toward an event's cost
    op.execute(
        """
        CREATE OR REPLACE FUNCTION calculate_event_booking_total_cost(p_event_id uuid)
        RETURNS numeric
        LANGUAGE sql
        STABLE
        AS $$
            SELECT COALESCE(SUM(total_price), 0)
            FROM event_service_bookings
            WHERE event_id = p_event_id
              AND booking_status <> 'cancelled'
        $$;
        """
    )


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS calculate_event_booking_total_cost(uuid)")
    op.drop_table("event_service_bookings")
    op.drop_table("events")
