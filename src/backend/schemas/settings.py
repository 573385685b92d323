"""
App settings Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class Theme(BaseModel):
    id: str
    name: str
    is_active: bool
    primary_color: str
    secondary_color: str
    accent_color: str
    background_color: str
    text_color: str
    button_color: str
    success_color: str
    error_color: str
    warning_color: str
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class NavigationTabSchema(BaseModel):
    id: str
    key: str
    title: str
    icon: Optional[str] = None
    route: str
    display_order: int = 0
    enabled: bool = True
    requires_auth: bool = False
    badge_count: int = 0

    model_config = {"from_attributes": True}


class FeatureFlagSchema(BaseModel):
    id: str
    key: str
    name: str
    description: Optional[str] = None
    enabled: bool
    category: Optional[str] = None

    model_config = {"from_attributes": True}


class AppTextSchema(BaseModel):
    id: str
    key: str
    language: str
    value: str
    category: Optional[str] = None

    model_config = {"from_attributes": True}


class AppConfigSchema(BaseModel):
    id: str
    key: str
    value: Any = None
    category: Optional[str] = None
    description: Optional[str] = None
    is_public: bool = True

    model_config = {"from_attributes": True}


class AllSettingsResponse(BaseModel):
    """Startup payload for the app."""

    features: dict[str, bool] = {}
    texts: dict[str, str] = {}
    theme: Optional[Theme] = None
    navigation: list[NavigationTabSchema] = []
    config: dict[str, Any] = {}
    version: str


class FeatureFlagsResponse(BaseModel):
    features: dict[str, bool]


class FeatureFlagUpdate(BaseModel):
    enabled: bool


class FeatureFlagResponse(BaseModel):
    feature: FeatureFlagSchema


class TextsResponse(BaseModel):
    texts: dict[str, str]
    language: str


class TextUpdate(BaseModel):
    value: str
    language: Optional[str] = Field(None, max_length=10)


class TextResponse(BaseModel):
    text: AppTextSchema


class TextsBulkUpdate(BaseModel):
    texts: dict[str, str]
    language: Optional[str] = Field(None, max_length=10)


class TextsBulkResponse(BaseModel):
    updated: int
    texts: list[AppTextSchema]


class ThemeResponse(BaseModel):
    theme: Theme


class ThemesResponse(BaseModel):
    themes: list[Theme]


class ThemeUpdate(BaseModel):
    """Colour changes; omitted colours stay as they are."""

    primary_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    secondary_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    accent_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    background_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    text_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    button_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    success_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    error_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    warning_color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)


class NavigationResponse(BaseModel):
    tabs: list[NavigationTabSchema]


class NavigationTabUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    enabled: Optional[bool] = None
    display_order: Optional[int] = None


class NavigationTabResponse(BaseModel):
    tab: NavigationTabSchema


class ConfigResponse(BaseModel):
    config: dict[str, Any]


class ConfigUpdate(BaseModel):
    value: Any


class ConfigEntryResponse(BaseModel):
    config: AppConfigSchema
