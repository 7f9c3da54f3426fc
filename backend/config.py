"""
Process-level configuration.

Responsibilities:
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No controller logic
- No tuning constants (see spec.py)
- No per-session settings (see controller.sync_config)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable process configuration.

    Constructed once and handed to every DriftController.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str = "dev"
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool = True
    enable_metrics: bool = True

    @property
    def verbose_decisions(self) -> bool:
        """True when every strategy decision (including holds) is logged."""
        return self.log_level.upper() == "DEBUG"

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """Load configuration from environment variables."""
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",
            enable_metrics=os.environ.get("ENABLE_METRICS", "1") == "1",
        )
