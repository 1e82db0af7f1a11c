# hexagono/models/quote.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hexagono.db import Base
from hexagono.domain.quotes import Priority, QuoteStatus, ServiceType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite devuelve datetimes naive; los tratamos como UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _uuid() -> str:
    return str(uuid.uuid4())


class Quote(Base):
    __tablename__ = "quotes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    quote_number: Mapped[str] = mapped_column(String(17), unique=True, index=True, nullable=False)
    access_token: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)

    # cliente
    client_name: Mapped[str] = mapped_column(String(100), nullable=False)
    client_email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    client_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    client_company: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # proyecto
    service_type: Mapped[ServiceType] = mapped_column(
        Enum(ServiceType, native_enum=False, length=20), index=True, nullable=False
    )
    timeline: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    budget_range: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    additional_requirements: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # gestión
    estimated_price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[QuoteStatus] = mapped_column(
        Enum(QuoteStatus, native_enum=False, length=20),
        index=True,
        nullable=False,
        default=QuoteStatus.PENDING,
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority, native_enum=False, length=10),
        nullable=False,
        default=Priority.MEDIUM,
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # metadata de recordatorios (no cambia el estado)
    last_reminder_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reminder_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    features: Mapped[List["QuoteFeature"]] = relationship(
        "QuoteFeature",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteFeature.id",
    )
    attachments: Mapped[List["QuoteAttachment"]] = relationship(
        "QuoteAttachment",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteAttachment.created_at",
    )
    notes: Mapped[List["QuoteNote"]] = relationship(
        "QuoteNote",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteNote.created_at.desc()",
    )
    status_history: Mapped[List["QuoteStatusHistory"]] = relationship(
        "QuoteStatusHistory",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteStatusHistory.id",
    )

    def __repr__(self) -> str:
        return f"<Quote id={self.id} number={self.quote_number} status={self.status}>"


class QuoteFeature(Base):
    __tablename__ = "quote_features"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[str] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    feature_name: Mapped[str] = mapped_column(String(255), nullable=False)
    feature_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    quote: Mapped["Quote"] = relationship("Quote", back_populates="features")


class QuoteAttachment(Base):
    __tablename__ = "quote_attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[str] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    storage_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    quote: Mapped["Quote"] = relationship("Quote", back_populates="attachments")


class QuoteNote(Base):
    __tablename__ = "quote_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[str] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    quote: Mapped["Quote"] = relationship("Quote", back_populates="notes")


class QuoteStatusHistory(Base):
    """Append-only: filas nuevas por cada cambio, nunca UPDATE/DELETE."""

    __tablename__ = "quote_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quote_id: Mapped[str] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"), index=True, nullable=False
    )
    previous_status: Mapped[Optional[QuoteStatus]] = mapped_column(
        Enum(QuoteStatus, native_enum=False, length=20), nullable=True
    )
    new_status: Mapped[QuoteStatus] = mapped_column(
        Enum(QuoteStatus, native_enum=False, length=20), nullable=False
    )
    changed_by: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    quote: Mapped["Quote"] = relationship("Quote", back_populates="status_history")

    def __repr__(self) -> str:
        return (
            f"<QuoteStatusHistory quote_id={self.quote_id} "
            f"{self.previous_status} -> {self.new_status} by={self.changed_by!r}>"
        )
