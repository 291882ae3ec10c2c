"""Config module exports."""

from ordinal.config.loader import OrdinalSettings, load_config
from ordinal.config.models import (
    DatabaseConfig,
    LoggingConfig,
    OrderingConfig,
    OrdinalConfig,
)

__all__ = [
    "load_config",
    "OrdinalConfig",
    "OrdinalSettings",
    "DatabaseConfig",
    "LoggingConfig",
    "OrderingConfig",
]
