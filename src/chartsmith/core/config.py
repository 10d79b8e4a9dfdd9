#!/usr/bin/env python3
"""
CHARTSMITH SETTINGS
-------------------
Runtime configuration shared by the engine, the helm collaborators and the
CLI. Values come from constructor arguments, the environment, or CLI flags,
with CLI flags taking precedence.

Author: Chartsmith Team
Date: 2026-10-19
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

HELM_BINARY_ENV = "CHARTSMITH_HELM"
LOG_LEVEL_ENV = "CHARTSMITH_LOG_LEVEL"


@dataclass
class Settings:
    """
    Configuration for a Chartsmith session.
    """
    helm_binary: str = "helm"               # Executable used for every helm call
    crd_dirname: str = "crds"               # Chart subdirectory holding untemplated CRDs
    crd_extensions: Tuple[str, ...] = field(default=(".yaml", ".yml"))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Builds settings from CHARTSMITH_* environment variables."""
        env = os.environ if environ is None else environ
        settings = cls()
        if env.get(HELM_BINARY_ENV):
            settings.helm_binary = env[HELM_BINARY_ENV]
        if env.get(LOG_LEVEL_ENV):
            level = env[LOG_LEVEL_ENV].upper()
            # Unknown names fall back to the default level
            if isinstance(logging.getLevelName(level), int):
                settings.log_level = level
        return settings

    def is_crd_file(self, filename: str) -> bool:
        """True when the file extension marks an auxiliary CRD document."""
        return os.path.splitext(filename)[1].lower() in self.crd_extensions
