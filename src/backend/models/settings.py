"""
App settings models.

Flat configuration tables the mobile app reads at startup: feature flags,
localized texts, colour themes, navigation tabs and general config values.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base
from db.types import UTCDateTime, utcnow


def _uuid_pk() -> Mapped[str]:
    return mapped_column(Uuid(as_uuid=False), primary_key=True, default=lambda: str(uuid4()))


class FeatureFlag(Base):
    __tablename__ = "feature_flags"

    id: Mapped[str] = _uuid_pk()
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow)


class AppText(Base):
    """Localized label; one row per (key, language)."""

    __tablename__ = "app_texts"

    __table_args__ = (UniqueConstraint("key", "language", name="uq_app_texts_key_language"),)

    id: Mapped[str] = _uuid_pk()
    key: Mapped[str] = mapped_column(String(100), index=True)
    language: Mapped[str] = mapped_column(String(10), default="de", index=True)
    value: Mapped[str] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow)


THEME_COLOR_FIELDS = (
    "primary_color",
    "secondary_color",
    "accent_color",
    "background_color",
    "text_color",
    "button_color",
    "success_color",
    "error_color",
    "warning_color",
)


class ThemeSetting(Base):
    """Colour theme. At most one row is active at a time."""

    __tablename__ = "theme_settings"

    id: Mapped[str] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(100), unique=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)

    primary_color: Mapped[str] = mapped_column(String(7), default="#4A90E2")
    secondary_color: Mapped[str] = mapped_column(String(7), default="#764ba2")
    accent_color: Mapped[str] = mapped_column(String(7), default="#5CB85C")
    background_color: Mapped[str] = mapped_column(String(7), default="#FFFFFF")
    text_color: Mapped[str] = mapped_column(String(7), default="#333333")
    button_color: Mapped[str] = mapped_column(String(7), default="#4A90E2")
    success_color: Mapped[str] = mapped_column(String(7), default="#5CB85C")
    error_color: Mapped[str] = mapped_column(String(7), default="#DC3545")
    warning_color: Mapped[str] = mapped_column(String(7), default="#FFC107")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow)


class NavigationTab(Base):
    __tablename__ = "navigation_tabs"

    id: Mapped[str] = _uuid_pk()
    key: Mapped[str] = mapped_column(String(50), unique=True)
    title: Mapped[str] = mapped_column(String(100))
    icon: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    route: Mapped[str] = mapped_column(String(100))
    display_order: Mapped[int] = mapped_column(Integer, default=0, index=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    requires_auth: Mapped[bool] = mapped_column(Boolean, default=False)
    badge_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow)


class AppConfig(Base):
    """General key/value configuration. Private entries are only served to admins."""

    __tablename__ = "app_config"

    id: Mapped[str] = _uuid_pk()
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    value: Mapped[Any] = mapped_column(JSON().with_variant(JSONB(), "postgresql"))
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, onupdate=utcnow)
