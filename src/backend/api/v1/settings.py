"""
App settings endpoints.

Public reads used by the app at startup plus admin-only updates.
"""

from uuid import UUID

from fastapi import APIRouter, Query

from api.deps import AdminUser, OptionalUser, SettingsServiceDep
from core.config import settings as app_settings
from schemas.settings import (
    AllSettingsResponse,
    AppConfigSchema,
    AppTextSchema,
    ConfigEntryResponse,
    ConfigResponse,
    ConfigUpdate,
    FeatureFlagResponse,
    FeatureFlagSchema,
    FeatureFlagsResponse,
    FeatureFlagUpdate,
    NavigationResponse,
    NavigationTabResponse,
    NavigationTabSchema,
    NavigationTabUpdate,
    TextResponse,
    TextsBulkResponse,
    TextsBulkUpdate,
    TextsResponse,
    TextUpdate,
    Theme,
    ThemeResponse,
    ThemesResponse,
    ThemeUpdate,
)
from schemas.voting import MessageResponse

router = APIRouter()


@router.get("", response_model=AllSettingsResponse)
async def get_all_settings(
    current_user: OptionalUser,
    service: SettingsServiceDep,
    lang: str | None = Query(None, max_length=10),
) -> AllSettingsResponse:
    """
    Everything the app loads at startup.

    Private config entries are only included for admins.
    """
    include_private = bool(current_user and current_user.is_admin)
    data = await service.get_all_settings(language=lang, include_private=include_private)
    return AllSettingsResponse(
        features=data["features"],
        texts=data["texts"],
        theme=Theme.model_validate(data["theme"]) if data["theme"] else None,
        navigation=[NavigationTabSchema.model_validate(tab) for tab in data["navigation"]],
        config=data["config"],
        version=data["version"],
    )


# ========== Feature flags ==========


@router.get("/features", response_model=FeatureFlagsResponse)
async def get_feature_flags(service: SettingsServiceDep) -> FeatureFlagsResponse:
    return FeatureFlagsResponse(features=await service.get_feature_flags())


@router.put("/features/{key}", response_model=FeatureFlagResponse)
async def update_feature_flag(
    key: str,
    body: FeatureFlagUpdate,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> FeatureFlagResponse:
    flag = await service.update_feature_flag(key, body.enabled, admin_id=admin_user.id)
    return FeatureFlagResponse(feature=FeatureFlagSchema.model_validate(flag))


# ========== Texts ==========


@router.get("/texts", response_model=TextsResponse)
async def get_texts(
    service: SettingsServiceDep,
    lang: str | None = Query(None, max_length=10),
) -> TextsResponse:
    texts = await service.get_texts(lang)
    return TextsResponse(texts=texts, language=lang or app_settings.DEFAULT_LANGUAGE)


@router.put("/texts", response_model=TextsBulkResponse)
async def bulk_update_texts(
    body: TextsBulkUpdate,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> TextsBulkResponse:
    """Update many texts at once. Unknown keys are skipped."""
    updated = await service.bulk_update_texts(body.texts, language=body.language, admin_id=admin_user.id)
    return TextsBulkResponse(
        updated=len(updated),
        texts=[AppTextSchema.model_validate(text) for text in updated],
    )


@router.put("/texts/{key}", response_model=TextResponse)
async def update_text(
    key: str,
    body: TextUpdate,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> TextResponse:
    text = await service.update_text(key, body.value, language=body.language, admin_id=admin_user.id)
    return TextResponse(text=AppTextSchema.model_validate(text))


# ========== Themes ==========


@router.get("/theme", response_model=ThemeResponse)
async def get_active_theme(service: SettingsServiceDep) -> ThemeResponse:
    return ThemeResponse(theme=Theme.model_validate(await service.get_active_theme()))


@router.get("/themes", response_model=ThemesResponse)
async def list_themes(admin_user: AdminUser, service: SettingsServiceDep) -> ThemesResponse:
    themes = await service.list_themes()
    return ThemesResponse(themes=[Theme.model_validate(theme) for theme in themes])


@router.put("/themes/{theme_id}", response_model=ThemeResponse)
async def update_theme(
    theme_id: UUID,
    body: ThemeUpdate,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> ThemeResponse:
    theme = await service.update_theme(str(theme_id), body.model_dump(), admin_id=admin_user.id)
    return ThemeResponse(theme=Theme.model_validate(theme))


@router.post("/themes/{theme_id}/activate", response_model=MessageResponse)
async def activate_theme(
    theme_id: UUID,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> MessageResponse:
    await service.activate_theme(str(theme_id), admin_id=admin_user.id)
    return MessageResponse(message="Theme activated successfully")


# ========== Navigation ==========


@router.get("/navigation", response_model=NavigationResponse)
async def get_navigation(service: SettingsServiceDep) -> NavigationResponse:
    tabs = await service.get_navigation()
    return NavigationResponse(tabs=[NavigationTabSchema.model_validate(tab) for tab in tabs])


@router.put("/navigation/{tab_id}", response_model=NavigationTabResponse)
async def update_navigation_tab(
    tab_id: UUID,
    body: NavigationTabUpdate,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> NavigationTabResponse:
    tab = await service.update_navigation_tab(str(tab_id), body.model_dump(), admin_id=admin_user.id)
    return NavigationTabResponse(tab=NavigationTabSchema.model_validate(tab))


# ========== App config ==========


@router.get("/config", response_model=ConfigResponse)
async def get_config(current_user: OptionalUser, service: SettingsServiceDep) -> ConfigResponse:
    include_private = bool(current_user and current_user.is_admin)
    return ConfigResponse(config=await service.get_config(include_private=include_private))


@router.put("/config/{key}", response_model=ConfigEntryResponse)
async def update_config(
    key: str,
    body: ConfigUpdate,
    admin_user: AdminUser,
    service: SettingsServiceDep,
) -> ConfigEntryResponse:
    entry = await service.update_config(key, body.value, admin_id=admin_user.id)
    return ConfigEntryResponse(config=AppConfigSchema.model_validate(entry))
