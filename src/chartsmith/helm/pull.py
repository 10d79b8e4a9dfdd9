"""
`helm pull` collaborator.

The chart is untarred so that the destination looks like
<into>/<chart>/Chart.yaml.
"""

import logging
from typing import Optional

from chartsmith.core.errors import ChartFetchError, RepositoryError
from chartsmith.helm.repository import HelmRepositories
from chartsmith.helm.runner import HelmRunner, format_command

logger = logging.getLogger("chartsmith.helm.pull")


class HelmPuller:

    def __init__(self, runner: Optional[HelmRunner] = None,
                 repositories: Optional[HelmRepositories] = None):
        self.runner = runner or HelmRunner()
        self.repositories = repositories or HelmRepositories(self.runner)

    def pull(self, repo_url: str, chart: str, version: str, into: str) -> None:
        """
        Pulls chart from repo_url into the directory `into`. A repository
        already registered for repo_url is used instead of --repo.
        """
        try:
            existing = self.repositories.find_name_by_url(repo_url)
        except RepositoryError as e:
            raise ChartFetchError(f"searching existing helm repositories for {repo_url}: {e}") from e
        if existing:
            chart = f"{existing}/{chart}"
            repo_url = ""

        args = ["pull", chart, "--untar", "--untardir", into]
        if version:
            args += ["--version", version]
        if repo_url:
            args += ["--repo", repo_url]

        cmd = self.runner.command(args)
        result = self.runner.run(args)
        if result.returncode != 0:
            raise ChartFetchError(
                f'running "{format_command(cmd)}": exit status {result.returncode}: {result.stderr.strip()}',
                cmd, result.stderr,
            )
        logger.info(f"Pulled {chart} into {into}")
