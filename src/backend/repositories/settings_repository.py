"""
Settings repository for database operations.

Covers the flat app-settings tables: feature flags, texts, themes,
navigation tabs and general config.
"""

from typing import Any, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.types import utcnow
from models.settings import AppConfig, AppText, FeatureFlag, NavigationTab, ThemeSetting


class SettingsRepository:
    """Repository for app settings database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _get_rowcount(self, result: Any) -> int:
        """Safely get rowcount from result."""
        return getattr(result, "rowcount", 0) or 0

    # Feature flags

    async def list_feature_flags(self, enabled_only: bool = False) -> list[FeatureFlag]:
        query = select(FeatureFlag)
        if enabled_only:
            query = query.where(FeatureFlag.enabled.is_(True))
        result = await self.db.execute(query.order_by(FeatureFlag.key))
        return list(result.scalars().all())

    async def get_feature_flag(self, key: str) -> Optional[FeatureFlag]:
        result = await self.db.execute(select(FeatureFlag).where(FeatureFlag.key == key))
        return result.scalar_one_or_none()

    async def set_feature_flag(self, key: str, enabled: bool) -> bool:
        result = await self.db.execute(
            update(FeatureFlag)
            .where(FeatureFlag.key == key)
            .values(enabled=enabled, updated_at=utcnow())
        )
        return self._get_rowcount(result) > 0

    # Texts

    async def list_texts(self, language: str) -> list[AppText]:
        result = await self.db.execute(
            select(AppText).where(AppText.language == language).order_by(AppText.key)
        )
        return list(result.scalars().all())

    async def get_text(self, key: str, language: str) -> Optional[AppText]:
        result = await self.db.execute(
            select(AppText).where(and_(AppText.key == key, AppText.language == language))
        )
        return result.scalar_one_or_none()

    async def set_text(self, key: str, language: str, value: str) -> bool:
        result = await self.db.execute(
            update(AppText)
            .where(and_(AppText.key == key, AppText.language == language))
            .values(value=value, updated_at=utcnow())
        )
        return self._get_rowcount(result) > 0

    # Themes

    async def get_active_theme(self) -> Optional[ThemeSetting]:
        result = await self.db.execute(
            select(ThemeSetting).where(ThemeSetting.is_active.is_(True)).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_themes(self) -> list[ThemeSetting]:
        result = await self.db.execute(select(ThemeSetting).order_by(ThemeSetting.name))
        return list(result.scalars().all())

    async def get_theme(self, theme_id: str) -> Optional[ThemeSetting]:
        result = await self.db.execute(select(ThemeSetting).where(ThemeSetting.id == theme_id))
        return result.scalar_one_or_none()

    async def update_theme(self, theme_id: str, colors: dict[str, str]) -> bool:
        result = await self.db.execute(
            update(ThemeSetting)
            .where(ThemeSetting.id == theme_id)
            .values(**colors, updated_at=utcnow())
        )
        return self._get_rowcount(result) > 0

    async def deactivate_all_themes(self) -> None:
        await self.db.execute(
            update(ThemeSetting).where(ThemeSetting.is_active.is_(True)).values(is_active=False)
        )

    async def activate_theme(self, theme_id: str) -> bool:
        result = await self.db.execute(
            update(ThemeSetting)
            .where(ThemeSetting.id == theme_id)
            .values(is_active=True, updated_at=utcnow())
        )
        return self._get_rowcount(result) > 0

    # Navigation

    async def list_navigation_tabs(self, enabled_only: bool = True) -> list[NavigationTab]:
        query = select(NavigationTab)
        if enabled_only:
            query = query.where(NavigationTab.enabled.is_(True))
        result = await self.db.execute(
            query.order_by(NavigationTab.display_order, NavigationTab.key)
        )
        return list(result.scalars().all())

    async def get_navigation_tab(self, tab_id: str) -> Optional[NavigationTab]:
        result = await self.db.execute(select(NavigationTab).where(NavigationTab.id == tab_id))
        return result.scalar_one_or_none()

    async def update_navigation_tab(self, tab_id: str, **fields: Any) -> bool:
        if not fields:
            return await self.get_navigation_tab(tab_id) is not None
        result = await self.db.execute(
            update(NavigationTab)
            .where(NavigationTab.id == tab_id)
            .values(**fields, updated_at=utcnow())
        )
        return self._get_rowcount(result) > 0

    # App config

    async def list_config(self, include_private: bool = False) -> list[AppConfig]:
        query = select(AppConfig)
        if not include_private:
            query = query.where(AppConfig.is_public.is_(True))
        result = await self.db.execute(query.order_by(AppConfig.key))
        return list(result.scalars().all())

    async def get_config(self, key: str) -> Optional[AppConfig]:
        result = await self.db.execute(select(AppConfig).where(AppConfig.key == key))
        return result.scalar_one_or_none()

    async def set_config(self, key: str, value: Any) -> bool:
        result = await self.db.execute(
            update(AppConfig)
            .where(AppConfig.key == key)
            .values(value=value, updated_at=utcnow())
        )
        return self._get_rowcount(result) > 0
