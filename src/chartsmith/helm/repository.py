"""
Lookup of repositories registered with the local helm client.
"""

import json
import logging
from typing import Dict, List, Optional

from chartsmith.core.errors import RepositoryError
from chartsmith.helm.runner import HelmRunner, format_command

logger = logging.getLogger("chartsmith.helm.repository")

NO_REPOSITORIES = "no repositories to show"


def _normalize(url: str) -> str:
    return url.strip().rstrip("/")


class HelmRepositories:
    """Resolves repository URLs to the aliases known by `helm repo list`."""

    def __init__(self, runner: Optional[HelmRunner] = None):
        self.runner = runner or HelmRunner()

    def list(self) -> List[Dict[str, str]]:
        """Returns the registered repositories as [{"name": ..., "url": ...}]."""
        args = ["repo", "list", "--output", "json"]
        result = self.runner.run(args)
        cmd = self.runner.command(args)
        if result.returncode != 0:
            # helm exits non-zero when nothing is registered
            if NO_REPOSITORIES in result.stderr:
                return []
            raise RepositoryError(
                f'running "{format_command(cmd)}": exit status {result.returncode}: {result.stderr.strip()}',
                cmd, result.stderr,
            )

        try:
            entries = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            raise RepositoryError(f"parsing output of {format_command(cmd)}: {e}", cmd) from e
        if not isinstance(entries, list):
            raise RepositoryError(f"unexpected output of {format_command(cmd)}: {entries!r}", cmd)
        return entries

    def find_name_by_url(self, url: str) -> str:
        """
        Returns the alias of the repository registered for url, or "" if
        none is registered.
        """
        wanted = _normalize(url)
        for entry in self.list():
            if _normalize(entry.get("url", "")) == wanted:
                logger.debug(f"Found existing helm repository {entry.get('name')!r} for {url}")
                return entry.get("name", "")
        return ""
