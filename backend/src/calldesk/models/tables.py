"""Relational tables for areas, campaigns and their clients."""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from ..db import Base

metadata = Base.metadata

areas = sa.Table(
    "areas",
    metadata,
    sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
    sa.Column("name", sa.String(200), nullable=False),
    sa.Column("password", sa.String(255), nullable=False),
    sa.Column(
        "admin_password",
        sa.String(128),
        nullable=False,
        comment="SHA-512 hex digest of the admin code",
    ),
    sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
)

campaigns = sa.Table(
    "campaigns",
    metadata,
    sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
    sa.Column(
        "area_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("areas.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("name", sa.String(200), nullable=False),
    sa.Column("script", sa.Text, nullable=True),
    sa.Column("active", sa.Boolean, nullable=False, server_default=sa.false()),
    sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    sa.Index("ix_campaigns_area_active", "area_id", "active"),
)

clients = sa.Table(
    "clients",
    metadata,
    sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
    sa.Column(
        "area_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("areas.id", ondelete="CASCADE"),
        nullable=False,
    ),
    sa.Column("name", sa.String(255), nullable=True),
    sa.Column("firstname", sa.String(255), nullable=True),
    sa.Column("phone", sa.String(32), nullable=False, comment="+ followed by digits"),
    sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    sa.Index("ix_clients_phone", "phone"),
)

client_campaigns = sa.Table(
    "client_campaigns",
    metadata,
    sa.Column(
        "client_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("clients.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    sa.Column(
        "campaign_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("campaigns.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
