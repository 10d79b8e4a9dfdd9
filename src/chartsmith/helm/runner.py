"""
Thin subprocess wrapper used by every helm collaborator.
"""

import logging
import subprocess
from typing import List, Optional

from chartsmith.core.errors import HelmNotFoundError

logger = logging.getLogger("chartsmith.helm")


class HelmRunner:
    """
    Runs the helm binary and captures stdout/stderr as text.

    Exit codes are not interpreted here; each collaborator decides what a
    non-zero exit or stray stderr output means for its command.
    """

    def __init__(self, binary: str = "helm", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout

    def command(self, args: List[str]) -> List[str]:
        return [self.binary, *args]

    def run(self, args: List[str]) -> subprocess.CompletedProcess:
        cmd = self.command(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise HelmNotFoundError(f"helm binary {self.binary!r} not found", cmd) from e


def format_command(cmd: List[str]) -> str:
    return " ".join(cmd)
