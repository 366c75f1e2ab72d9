"""Relational schema for screen sets (SQLAlchemy Core)."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

screens = Table(
    "screens",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("parent_id", String(128), nullable=False),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False, default=""),
    # Element records plus one "_metadata" record carrying the feature id
    Column("elements_json", Text, nullable=False, default="[]"),
    # Keeps screen order stable across reads
    Column("position", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_screens_parent_id", "parent_id"),
)

app_flows = Table(
    "app_flows",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("parent_id", String(128), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("parent_id", name="uq_app_flows_parent_id"),
)

flow_steps = Table(
    "flow_steps",
    metadata,
    Column("id", String(64), primary_key=True),
    Column(
        "app_flow_id",
        String(64),
        ForeignKey("app_flows.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("description", Text, nullable=False, default=""),
    Column("screen_id", String(64), ForeignKey("screens.id", ondelete="SET NULL"), nullable=True),
    Column("position", Integer, nullable=False),
    UniqueConstraint("app_flow_id", "position", name="uq_flow_steps_position"),
)

__all__ = ["metadata", "screens", "app_flows", "flow_steps"]
