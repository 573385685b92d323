"""
Settings store.

Key/value style access to the app-settings tables the mobile client loads
at startup. Writes are admin-only at the API layer; this module only knows
about rows and missing keys.
"""

from typing import Any, Optional

import structlog

from core.config import settings
from core.exceptions import SettingNotFoundError
from db.session import Database
from models.settings import THEME_COLOR_FIELDS, AppConfig, AppText, FeatureFlag, NavigationTab, ThemeSetting
from repositories.settings_repository import SettingsRepository

logger = structlog.get_logger(__name__)

NAVIGATION_EDITABLE_FIELDS = ("title", "icon", "enabled", "display_order")


class SettingsService:
    """Feature flags, texts, themes, navigation and config."""

    def __init__(self, database: Database):
        self.database = database

    async def get_all_settings(
        self,
        language: Optional[str] = None,
        include_private: bool = False,
    ) -> dict[str, Any]:
        """Everything the app needs in one payload."""
        language = language or settings.DEFAULT_LANGUAGE

        async with self.database.session() as session:
            repo = SettingsRepository(session)
            flags = await repo.list_feature_flags(enabled_only=True)
            texts = await repo.list_texts(language)
            theme = await repo.get_active_theme()
            tabs = await repo.list_navigation_tabs(enabled_only=True)
            config = await repo.list_config(include_private=include_private)

        return {
            "features": {flag.key: flag.enabled for flag in flags},
            "texts": {text.key: text.value for text in texts},
            "theme": theme,
            "navigation": tabs,
            "config": {entry.key: entry.value for entry in config},
            "version": settings.APP_VERSION,
        }

    # Feature flags

    async def get_feature_flags(self) -> dict[str, bool]:
        async with self.database.session() as session:
            flags = await SettingsRepository(session).list_feature_flags()
        return {flag.key: flag.enabled for flag in flags}

    async def update_feature_flag(self, key: str, enabled: bool, admin_id: Optional[str] = None) -> FeatureFlag:
        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            if not await repo.set_feature_flag(key, enabled):
                raise SettingNotFoundError("Feature flag not found")
            flag = await repo.get_feature_flag(key)

        logger.info("feature_flag_updated", key=key, enabled=enabled, admin_id=admin_id)
        return flag

    # Texts

    async def get_texts(self, language: Optional[str] = None) -> dict[str, str]:
        async with self.database.session() as session:
            texts = await SettingsRepository(session).list_texts(language or settings.DEFAULT_LANGUAGE)
        return {text.key: text.value for text in texts}

    async def update_text(
        self,
        key: str,
        value: str,
        language: Optional[str] = None,
        admin_id: Optional[str] = None,
    ) -> AppText:
        language = language or settings.DEFAULT_LANGUAGE

        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            if not await repo.set_text(key, language, value):
                raise SettingNotFoundError("Text not found")
            text = await repo.get_text(key, language)

        logger.info("app_text_updated", key=key, language=language, admin_id=admin_id)
        return text

    async def bulk_update_texts(
        self,
        texts: dict[str, str],
        language: Optional[str] = None,
        admin_id: Optional[str] = None,
    ) -> list[AppText]:
        """Update many texts of one language. Unknown keys are skipped."""
        language = language or settings.DEFAULT_LANGUAGE
        updated: list[AppText] = []

        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            for key, value in texts.items():
                if await repo.set_text(key, language, value):
                    updated.append(await repo.get_text(key, language))

        logger.info(
            "app_texts_bulk_updated",
            language=language,
            requested=len(texts),
            updated=len(updated),
            admin_id=admin_id,
        )
        return updated

    # Themes

    async def get_active_theme(self) -> ThemeSetting:
        async with self.database.session() as session:
            theme = await SettingsRepository(session).get_active_theme()
        if theme is None:
            raise SettingNotFoundError("No active theme found")
        return theme

    async def list_themes(self) -> list[ThemeSetting]:
        async with self.database.session() as session:
            return await SettingsRepository(session).list_themes()

    async def update_theme(
        self,
        theme_id: str,
        colors: dict[str, Optional[str]],
        admin_id: Optional[str] = None,
    ) -> ThemeSetting:
        """Change the given colours; ``None`` leaves a colour as it is."""
        values = {
            field: value for field, value in colors.items() if field in THEME_COLOR_FIELDS and value is not None
        }

        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            if values:
                found = await repo.update_theme(theme_id, values)
            else:
                found = await repo.get_theme(theme_id) is not None
            if not found:
                raise SettingNotFoundError("Theme not found")
            theme = await repo.get_theme(theme_id)

        logger.info("theme_updated", theme_id=theme_id, fields=sorted(values), admin_id=admin_id)
        return theme

    async def activate_theme(self, theme_id: str, admin_id: Optional[str] = None) -> ThemeSetting:
        """Make one theme the only active theme. Nothing changes if it is missing."""
        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            await repo.deactivate_all_themes()
            if not await repo.activate_theme(theme_id):
                raise SettingNotFoundError("Theme not found")
            theme = await repo.get_theme(theme_id)

        logger.info("theme_activated", theme_id=theme_id, admin_id=admin_id)
        return theme

    # Navigation

    async def get_navigation(self) -> list[NavigationTab]:
        async with self.database.session() as session:
            return await SettingsRepository(session).list_navigation_tabs(enabled_only=True)

    async def update_navigation_tab(
        self,
        tab_id: str,
        changes: dict[str, Any],
        admin_id: Optional[str] = None,
    ) -> NavigationTab:
        values = {
            field: value
            for field, value in changes.items()
            if field in NAVIGATION_EDITABLE_FIELDS and value is not None
        }

        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            if not await repo.update_navigation_tab(tab_id, **values):
                raise SettingNotFoundError("Navigation tab not found")
            tab = await repo.get_navigation_tab(tab_id)

        logger.info("navigation_tab_updated", tab_id=tab_id, fields=sorted(values), admin_id=admin_id)
        return tab

    # App config

    async def get_config(self, include_private: bool = False) -> dict[str, Any]:
        async with self.database.session() as session:
            entries = await SettingsRepository(session).list_config(include_private=include_private)
        return {entry.key: entry.value for entry in entries}

    async def update_config(self, key: str, value: Any, admin_id: Optional[str] = None) -> AppConfig:
        async with self.database.transaction() as session:
            repo = SettingsRepository(session)
            if not await repo.set_config(key, value):
                raise SettingNotFoundError("Config not found")
            entry = await repo.get_config(key)

        logger.info("app_config_updated", key=key, admin_id=admin_id)
        return entry
