"""initial GOT-ID cloud schema

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("plate", sa.String(length=16), nullable=False, unique=True),
        sa.Column("vin", sa.String(length=32), nullable=True),
        sa.Column("make", sa.String(length=64), nullable=True),
        sa.Column("model", sa.String(length=128), nullable=True),
        sa.Column("colour", sa.String(length=32), nullable=True),
        sa.Column("gotid_uuid", sa.String(length=128), nullable=True),
        sa.Column("public_key", sa.String(length=300), nullable=True),
        sa.Column("has_gotid", sa.Boolean(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=True, server_default="ACTIVE"),
        sa.Column("raw_json", postgresql.JSONB(), nullable=True),
    )
    op.create_index("ix_vehicles_public_key", "vehicles", ["public_key"], unique=True)

    op.create_table(
        "scan_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ver", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("flags", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("uuid", sa.String(length=128), nullable=True),
        sa.Column("counter", sa.Integer(), nullable=True),
        sa.Column("sig_valid", sa.Boolean(), nullable=True),
        sa.Column("chal_valid", sa.Boolean(), nullable=True),
        sa.Column("tamper_flag", sa.Boolean(), nullable=True),
        sa.Column("result", sa.String(length=32), nullable=True),
        sa.Column("plate", sa.String(length=16), nullable=True),
        sa.Column("vin", sa.String(length=32), nullable=True),
        sa.Column("make", sa.String(length=64), nullable=True),
        sa.Column("model", sa.String(length=128), nullable=True),
        sa.Column("colour", sa.String(length=32), nullable=True),
        sa.Column("rssi", sa.Integer(), nullable=True),
        sa.Column("est_distance_m", sa.Float(), nullable=True),
        sa.Column("gps_lat", sa.Float(), nullable=True),
        sa.Column("gps_lon", sa.Float(), nullable=True),
        sa.Column("scanner_id", sa.String(length=64), nullable=True),
        sa.Column("officer_id", sa.String(length=64), nullable=True),
        sa.Column("raw_json", postgresql.JSONB(), nullable=True),
    )
    op.create_index("ix_scan_events_created_at", "scan_events", ["created_at"])
    op.create_index("ix_scan_events_uuid", "scan_events", ["uuid"])
    op.create_index("ix_scan_events_plate", "scan_events", ["plate"])

    op.create_table(
        "anpr_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("plate", sa.Text(), nullable=False),
        sa.Column("camera_id", sa.Text(), nullable=True),
        sa.Column("confidence", sa.Float(), nullable=True),
        sa.Column("raw_json", postgresql.JSONB(), nullable=True),
    )
    op.create_index("ix_anpr_events_ts", "anpr_events", ["ts"])
    op.create_index("ix_anpr_events_plate", "anpr_events", ["plate"])

    op.create_table(
        "ai_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("plate", sa.Text(), nullable=True),
        sa.Column("camera_id", sa.Text(), nullable=True),
        sa.Column("vehicle_conf", sa.Float(), nullable=True),
        sa.Column("make", sa.Text(), nullable=True),
        sa.Column("model", sa.Text(), nullable=True),
        sa.Column("colour", sa.Text(), nullable=True),
        sa.Column("raw_json", postgresql.JSONB(), nullable=True),
    )
    op.create_index("ix_ai_events_ts", "ai_events", ["ts"])
    op.create_index("ix_ai_events_plate", "ai_events", ["plate"])

    op.create_table(
        "fusion_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("plate", sa.String(length=16), nullable=True),
        sa.Column("scan_id", sa.Integer(), sa.ForeignKey("scan_events.id", ondelete="CASCADE"), nullable=True),
        sa.Column("anpr_id", sa.Integer(), nullable=True),
        sa.Column("ai_id", sa.Integer(), nullable=True),
        sa.Column("fusion_verdict", sa.String(length=32), nullable=False),
        sa.Column("final_label", sa.String(length=32), nullable=False),
        sa.Column("visual_confidence", sa.String(length=16), nullable=False, server_default="NONE"),
        sa.Column("has_gotid", sa.Boolean(), nullable=True),
        sa.Column("registry_status", sa.String(length=32), nullable=True),
        sa.Column("reasons", postgresql.JSONB(), nullable=True),
        sa.Column("raw_json", postgresql.JSONB(), nullable=True),
    )
    op.create_index("ix_fusion_events_created_at", "fusion_events", ["created_at"])
    op.create_index("ix_fusion_events_plate", "fusion_events", ["plate"])
    op.create_index("ix_fusion_events_fusion_verdict", "fusion_events", ["fusion_verdict"])


def downgrade() -> None:
    op.drop_table("fusion_events")
    op.drop_table("ai_events")
    op.drop_table("anpr_events")
    op.drop_table("scan_events")
    op.drop_table("vehicles")
