"""
Settings for envconfig's own ambient behaviour.

Manifesto:
    The library that loads everyone else's configuration still has a couple
    of knobs of its own (how it logs).  Those are read the same way every
    spine service reads its settings: a validated, cached pydantic-settings
    object with a dedicated ``ENVCONFIG_`` prefix.

Tags:
    envconfig, settings, pydantic, caching

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvConfigSettings(BaseSettings):
    """Ambient settings, overridable through ``ENVCONFIG_*`` variables.

    Fields
    ──────
    log_level    : Level for envconfig's structured logs
    log_format   : ``json``, ``console``, or ``auto`` (JSON unless stdout is a tty)
    service_name : Value of ``service.name`` in emitted log events
    """

    model_config = SettingsConfigDict(
        env_prefix="ENVCONFIG_",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    log_format: Literal["auto", "json", "console"] = Field(default="auto")
    service_name: str = Field(default="envconfig")

    @property
    def json_logs(self) -> bool | None:
        """Tri-state JSON switch as expected by ``configure_logging``."""
        if self.log_format == "auto":
            return None
        return self.log_format == "json"


_settings_cache: dict[str, EnvConfigSettings] = {}
_settings_lock = threading.Lock()


def get_settings(*, _force_reload: bool = False) -> EnvConfigSettings:
    """Load, validate, and cache an :class:`EnvConfigSettings` instance."""
    with _settings_lock:
        if _force_reload or "default" not in _settings_cache:
            _settings_cache["default"] = EnvConfigSettings()
        return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (for testing)."""
    with _settings_lock:
        _settings_cache.clear()


__all__ = [
    "EnvConfigSettings",
    "get_settings",
    "clear_settings_cache",
]
