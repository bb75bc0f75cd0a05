"""
Configuration Schema (``returns_config.schema``).

Frozen dataclasses describing a returns kernel deployment.  Instances are
produced by ``returns_config.loader`` from YAML and consumed by
``returns_kernel.services.wiring``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from returns_kernel.domain.validation import ValidationRules

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DatabaseSettings:
    """Where the kernel's tables live."""
    url: str = "sqlite+pysqlite:///:memory:"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10

    def __post_init__(self):
        if not self.url:
            raise ValueError("database.url cannot be empty")
        if self.pool_size <= 0:
            raise ValueError("database.pool_size must be positive")
        if self.max_overflow < 0:
            raise ValueError("database.max_overflow cannot be negative")


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"

    def __post_init__(self):
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"logging.level must be one of {VALID_LOG_LEVELS}, got '{self.level}'"
            )


@dataclass(frozen=True)
class ReturnsConfig:
    """
    Complete configuration of the returns kernel.

    Field defaults reproduce the permissive behaviour: every validation rule
    off, cascades silently skipped when a return has no order item.
    """
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    rules: ValidationRules = field(default_factory=ValidationRules)
    refund_reason_prefix: str = "Returned Item: "
    require_order_item_for_cascade: bool = False
