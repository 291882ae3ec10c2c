"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (ORDINAL__SECTION__KEY)
3. Project YAML (.ordinal/config.yaml)
4. Global YAML (~/.config/ordinal/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    ORDINAL__<SECTION>__<KEY>=<VALUE>

Examples:
    ORDINAL__LOGGING__LEVEL=DEBUG
    ORDINAL__DATABASE__BUSY_TIMEOUT_MS=10000
    ORDINAL__ORDERING__BOUNDS=clamp
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
BoundsPolicy = Literal["reject", "clamp", "trust"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        ORDINAL__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every committed mutation.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DatabaseConfig(BaseModel):
    """Database connection configuration.

    Env vars:
        ORDINAL__DATABASE__URL: SQLAlchemy URL (overrides path)
        ORDINAL__DATABASE__PATH: SQLite database file
        ORDINAL__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
    """

    url: str | None = Field(
        default=None,
        description="SQLAlchemy database URL. When unset, a SQLite file at `path` is used.",
    )
    path: str = Field(
        default=".ordinal/ordinal.db",
        description="SQLite database file, relative to the project root unless absolute.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long a write transaction waits for "
        "the writer lock before failing with a storage error. There is no retry.",
    )
    echo: bool = Field(
        default=False,
        description="Echo every SQL statement through the sqlalchemy.engine logger.",
    )

    @field_validator("busy_timeout_ms")
    @classmethod
    def validate_busy_timeout(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"busy_timeout_ms must be >= 0, got {v}")
        return v


class OrderingConfig(BaseModel):
    """Ordering engine behaviour.

    Env vars:
        ORDINAL__ORDERING__BOUNDS: reject | clamp | trust
    """

    bounds: BoundsPolicy = Field(
        default="reject",
        description="Handling of a reorder/move target index past the last position. "
        "reject raises an invalid-argument error, clamp moves to the last position, "
        "trust applies the index as given and compacts the parent when it lands "
        "past the end.",
    )
    public_id_length: int = Field(
        default=12,
        description="Length of generated public identifiers.",
    )

    @field_validator("public_id_length")
    @classmethod
    def validate_public_id_length(cls, v: int) -> int:
        if not (8 <= v <= 32):
            raise ValueError(f"public_id_length must be 8-32, got {v}")
        return v


class OrdinalConfig(BaseModel):
    """Root configuration for Ordinal.

    All settings can be configured via:
    1. Environment variables: ORDINAL__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    ordering: OrderingConfig = Field(default_factory=OrderingConfig)
