"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with AMALGAM_ prefix

Example:
  AMALGAM_DEFAULT_STRATEGY=stop_at_defined
  AMALGAM_DUMP_OPERANDS=false
"""

from __future__ import annotations

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import amalgam.chains.strategies as strategies
import amalgam.constants as constants


class Settings(_pydantic_settings.BaseSettings):
    """
    Amalgam configuration settings.

    All settings can be overridden via environment variables with the
    AMALGAM_ prefix.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="AMALGAM_",
        extra="ignore",
    )

    default_strategy: str = _pydantic.Field(
        default=constants.DEFAULT_STRATEGY,
        description="Chain strategy used when none is given explicitly",
    )
    """Name of the strategy for new chains and for chain rules coercing plain values."""

    dump_operands: bool = True
    """Dump both operands and the derived rules when a rule faults."""

    log_conflicts: bool = True
    """Report DEFINE conflicts through the sink (other faults are always reported)."""

    @_pydantic.field_validator("default_strategy")
    @classmethod
    def _validate_strategy(cls, value: str) -> str:
        """Normalize the strategy name and check that it is registered."""
        name = value.strip().lower()
        if name not in strategies.strategy_names():
            raise ValueError(
                f"Unknown chain strategy '{value}'. "
                f"Available: {', '.join(strategies.strategy_names())}"
            )
        return name


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
