"""
Engine configuration.

Settings that a host application may want to change without touching code:
the AI search depth, the entanglement pass cap and the log level used by
the console front end. Defaults come from qgambit.constants. Values can be
overridden with QGAMBIT_* environment variables via EngineConfig.from_env().

Out-of-range depths are clamped rather than rejected, so a host passing an
over-ambitious depth still gets a usable (bounded) search.
"""

import logging
import os
from typing import Mapping

from pydantic import BaseModel, field_validator

from qgambit.constants import (
    DEFAULT_SEARCH_DEPTH,
    MAX_ENTANGLEMENT_PASSES,
    MAX_SEARCH_DEPTH,
)

ENV_PREFIX = "QGAMBIT_"


class EngineConfig(BaseModel):
    """
    Validated engine settings.

    Fields:
        search_depth: Plies searched by the AI (clamped to [1, MAX_SEARCH_DEPTH]).
        max_entanglement_passes: Pass cap for entanglement resolution (>= 1).
        log_level: Name of a standard logging level, e.g. "INFO".
    """

    search_depth: int = DEFAULT_SEARCH_DEPTH
    max_entanglement_passes: int = MAX_ENTANGLEMENT_PASSES
    log_level: str = "INFO"

    @field_validator("search_depth")
    @classmethod
    def clamp_search_depth(cls, v: int) -> int:
        """Clamp search_depth to a safe operating range."""
        return max(1, min(v, MAX_SEARCH_DEPTH))

    @field_validator("max_entanglement_passes")
    @classmethod
    def check_passes(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_entanglement_passes must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v!r}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineConfig":
        """Build a config from QGAMBIT_* variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
