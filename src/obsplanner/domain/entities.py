"""
Domain entities for obsplanner.

Resource registries (encoders, booths, commentators, producers, suites,
networks), the blocks that assign them over a time range, the block link
tables, and the producer's planning lane.

Datetimes are stored as UTC. SQLite hands them back naive; readers treat a
naive value as UTC.
"""

from __future__ import annotations

import uuid as uuid_module
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from ..infra.db import Base


def _uuid_pk() -> Mapped[uuid_module.UUID]:
    return mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid_module.uuid4)


class Encoder(Base):
    """A transmission encoder; one timeline lane per encoder."""

    __tablename__ = "encoders"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Encoder(id={self.id}, name={self.name})>"


class Booth(Base):
    """A commentary booth."""

    __tablename__ = "booths"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Booth(id={self.id}, name={self.name})>"


class Commentator(Base):
    __tablename__ = "commentators"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Commentator(id={self.id}, name={self.name})>"


class Producer(Base):
    __tablename__ = "producers"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Producer(id={self.id}, name={self.name})>"


class Suite(Base):
    __tablename__ = "suites"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Suite(id={self.id}, name={self.name})>"


class Network(Base):
    """A broadcast network a booth or block feeds (e.g. CBC TV)."""

    __tablename__ = "networks"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Network(id={self.id}, name={self.name})>"


class Block(Base):
    """
    A resource-assignment block.

    ``start_time``/``end_time`` are the nominal (event) window.
    ``broadcast_start_time``/``broadcast_end_time`` are the optional on-air
    window; when both are set they take precedence for placement.
    ``duration`` is kept as ``H:M:S`` text.
    """

    __tablename__ = "blocks"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    block_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    obs_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    broadcast_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    broadcast_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration: Mapped[str | None] = mapped_column(String(32), nullable=True)
    encoder_id: Mapped[uuid_module.UUID | None] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("encoders.id", ondelete="SET NULL"), nullable=True
    )
    producer_id: Mapped[uuid_module.UUID | None] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("producers.id", ondelete="SET NULL"), nullable=True
    )
    suite_id: Mapped[uuid_module.UUID | None] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("suites.id", ondelete="SET NULL"), nullable=True
    )
    source_event_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    obs_group: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    canadian_content: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    encoder: Mapped[Encoder | None] = relationship("Encoder")
    producer: Mapped[Producer | None] = relationship("Producer")
    suite: Mapped[Suite | None] = relationship("Suite")
    booth_links: Mapped[list[BlockBooth]] = relationship(
        "BlockBooth", back_populates="block", cascade="all, delete-orphan", passive_deletes=True
    )
    commentator_links: Mapped[list[BlockCommentator]] = relationship(
        "BlockCommentator", back_populates="block", cascade="all, delete-orphan", passive_deletes=True
    )
    network_links: Mapped[list[BlockNetwork]] = relationship(
        "BlockNetwork", back_populates="block", cascade="all, delete-orphan", passive_deletes=True
    )
    planning: Mapped[PlanningEntry | None] = relationship(
        "PlanningEntry", uselist=False, back_populates="block", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Block(id={self.id}, name={self.name}, start={self.start_time}, end={self.end_time})>"


class BlockBooth(Base):
    """A booth assigned to a block, optionally feeding one network."""

    __tablename__ = "block_booths"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    block_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("blocks.id", ondelete="CASCADE"), nullable=False
    )
    booth_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("booths.id", ondelete="CASCADE"), nullable=False
    )
    network_id: Mapped[uuid_module.UUID | None] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("networks.id", ondelete="SET NULL"), nullable=True
    )

    block: Mapped[Block] = relationship("Block", back_populates="booth_links")
    booth: Mapped[Booth] = relationship("Booth")
    network: Mapped[Network | None] = relationship("Network")

    __table_args__ = (UniqueConstraint("block_id", "booth_id", "network_id", name="ix_block_booths_unique"),)


class BlockCommentator(Base):
    __tablename__ = "block_commentators"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    block_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("blocks.id", ondelete="CASCADE"), nullable=False
    )
    commentator_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("commentators.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)

    block: Mapped[Block] = relationship("Block", back_populates="commentator_links")
    commentator: Mapped[Commentator] = relationship("Commentator")

    __table_args__ = (UniqueConstraint("block_id", "commentator_id", name="ix_block_commentators_unique"),)


class BlockNetwork(Base):
    __tablename__ = "block_networks"

    id: Mapped[uuid_module.UUID] = _uuid_pk()
    block_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("blocks.id", ondelete="CASCADE"), nullable=False
    )
    network_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("networks.id", ondelete="CASCADE"), nullable=False
    )

    block: Mapped[Block] = relationship("Block", back_populates="network_links")
    network: Mapped[Network] = relationship("Network")

    __table_args__ = (UniqueConstraint("block_id", "network_id", name="ix_block_networks_unique"),)


class PlanningEntry(Base):
    """
    A block on the producer's "On Air" lane.

    The producer override pair, when both are set, wins over the block's own
    effective times on that lane only.
    """

    __tablename__ = "planning"

    block_id: Mapped[uuid_module.UUID] = mapped_column(
        sa.Uuid(as_uuid=True), ForeignKey("blocks.id", ondelete="CASCADE"), primary_key=True
    )
    producer_broadcast_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    producer_broadcast_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    block: Mapped[Block] = relationship("Block", back_populates="planning")

    def __repr__(self) -> str:
        return f"<PlanningEntry(block_id={self.block_id}, sort_order={self.sort_order})>"


# Resource type name (as used by the API and CLI) -> model
RESOURCE_MODELS: dict[str, type[Base]] = {
    "commentators": Commentator,
    "producers": Producer,
    "encoders": Encoder,
    "booths": Booth,
    "suites": Suite,
    "networks": Network,
}
