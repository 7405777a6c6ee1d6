"""Engine options, overridable through ``INI_SETTINGS_*`` environment variables."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["IniSettingsConfig"]


class IniSettingsConfig(BaseSettings):
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the primary file.",
    )
    backup_suffix: str = Field(
        default=".bak",
        min_length=1,
        description="Appended to the primary path to name the backup file.",
    )
    newline: Optional[str] = Field(
        default=None,
        description="Line terminator written to disk; None uses the platform convention.",
    )

    model_config = SettingsConfigDict(env_prefix="INI_SETTINGS_", extra="ignore")
