"""Base model class and common mixins for SQLAlchemy models.

This module provides the declarative base for all tables of the
Carcassonne database schema.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models.

    Provides type_annotation_map for automatic type inference from Python types.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Mixin for rows carrying created_at and updated_at timestamps.

    The domain stamps both values itself; the server defaults only cover rows
    inserted by hand.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
