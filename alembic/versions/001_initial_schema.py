"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

listing_status = ENUM("DRAFT", "PUBLISHED", "ARCHIVED", name="listing_status", create_type=False)
listing_category = ENUM(
    "ELECTRONICS",
    "VEHICLES",
    "REAL_ESTATE",
    "HOME_AND_GARDEN",
    "FASHION",
    "JOBS",
    "SERVICES",
    "OTHER",
    name="listing_category",
    create_type=False,
)
currency_code = ENUM("USD", "EUR", "GBP", "UAH", name="currency_code", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    for enum in (listing_status, listing_category, currency_code):
        enum.create(bind, checkfirst=True)

    op.create_table(
        "listings",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("price_amount", sa.Numeric(19, 2), nullable=False),
        sa.Column("price_currency", currency_code, nullable=False),
        sa.Column("category", listing_category, nullable=False),
        sa.Column("status", listing_status, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        # Optimistic-concurrency stamp
        sa.Column("version", sa.BigInteger(), nullable=False, server_default="0"),
    )
    op.create_index("ix_listings_category", "listings", ["category"])
    op.create_index("ix_listings_status", "listings", ["status"])
    op.create_index("ix_listings_status_category", "listings", ["status", "category"])

    op.create_table(
        "listing_photos",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "listing_id",
            UUID(as_uuid=True),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(50), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("storage_path", sa.String(500), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_listing_photos_listing_id", "listing_photos", ["listing_id"])

    op.create_table(
        "idempotency_records",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("idempotency_key", sa.String(255), nullable=False, unique=True),
        sa.Column("listing_id", UUID(as_uuid=True), nullable=False),
        sa.Column("result_payload", sa.Text(), nullable=False),
        sa.Column("status_code", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_idempotency_records_expires_at", "idempotency_records", ["expires_at"])

    # Audit trail, written outside the audited transaction
    op.create_table(
        "audit_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("event_type", sa.String(64), nullable=False),
        sa.Column("listing_id", UUID(as_uuid=True), nullable=False),
        sa.Column("payload", JSONB, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_audit_logs_event_type", "audit_logs", ["event_type"])
    op.create_index("ix_audit_logs_listing_id", "audit_logs", ["listing_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("idempotency_records")
    op.drop_table("listing_photos")
    op.drop_table("listings")
    bind = op.get_bind()
    for enum in (currency_code, listing_category, listing_status):
        enum.drop(bind, checkfirst=True)
