"""
Composer configuration: all environment variables in one place.

Read from environment at runtime. The kernel itself never reads the
environment; the service turns these settings into RenderOptions.
"""

from __future__ import annotations

import os

from composer.kernel.types import RenderOptions


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


class Settings:
    """Application settings from environment variables."""

    # Rendering
    RENDER_CACHE_SIZE: int = _int_env("COMPOSER_RENDER_CACHE_SIZE", 128)
    MAX_EVAL_STEPS: int = _int_env("COMPOSER_MAX_EVAL_STEPS", 200_000)
    FALLBACK_COMPONENT_NAME: str = os.environ.get("COMPOSER_FALLBACK_COMPONENT_NAME", "DynamicComponent")

    # Logging
    LOG_LEVEL: str = os.environ.get("COMPOSER_LOG_LEVEL", "INFO").upper()

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def DEBUG(self) -> bool:
        return self.ENVIRONMENT == "development"

    def render_options(self, editor_mode: bool = False, selected_component_id: str | None = None) -> RenderOptions:
        return RenderOptions(
            cache_size=self.RENDER_CACHE_SIZE,
            max_steps=self.MAX_EVAL_STEPS,
            fallback_component_name=self.FALLBACK_COMPONENT_NAME,
            editor_mode=editor_mode,
            selected_component_id=selected_component_id,
        )


# Singleton instance
settings = Settings()

if settings.MAX_EVAL_STEPS <= 0:
    raise RuntimeError("COMPOSER_MAX_EVAL_STEPS must be positive")
if settings.RENDER_CACHE_SIZE < 0:
    raise RuntimeError("COMPOSER_RENDER_CACHE_SIZE must not be negative")
