#!/usr/bin/env python3
"""
CHARTSMITH TEMPLATER
--------------------
Runs `helm template` for a set of TemplateOptions and returns its stdout.

Any output on stderr is treated as a failure, even when helm exits 0.
Note that helm 3 never prints the chart's "crds" directory here; the
RenderEngine merges those documents in separately.

Author: Chartsmith Team
Date: 2026-10-19
"""

import logging
from typing import List, Optional

from chartsmith.core.errors import RepositoryError, TemplaterError
from chartsmith.core.models import TemplateOptions
from chartsmith.helm.repository import HelmRepositories
from chartsmith.helm.runner import HelmRunner, format_command

logger = logging.getLogger("chartsmith.helm.template")


class HelmTemplater:
    """
    The templating collaborator. A repository URL is swapped for a local
    alias when the helm client already knows that URL.
    """

    def __init__(self, runner: Optional[HelmRunner] = None,
                 repositories: Optional[HelmRepositories] = None):
        self.runner = runner or HelmRunner()
        self.repositories = repositories or HelmRepositories(self.runner)

    def build_args(self, opts: TemplateOptions) -> List[str]:
        args = ["template"]
        chart = opts.chart

        if opts.repo:
            try:
                existing = self.repositories.find_name_by_url(opts.repo)
            except RepositoryError as e:
                raise TemplaterError(
                    f"searching existing helm repositories for {opts.repo}: {e}"
                ) from e
            if existing:
                chart = f"{existing}/{opts.chart}"
            else:
                args += ["--repo", opts.repo]

        if opts.version:
            args += ["--version", opts.version]
        if opts.namespace:
            args += ["--create-namespace", "--namespace", opts.namespace]
        for override in opts.set:
            args += ["--set", override]
        for values_path in opts.values:
            args += ["--values", values_path]

        # The release [NAME] is an optional leading parameter to [CHART]
        if opts.release:
            args.append(opts.release)
        args.append(chart)
        return args

    def template(self, opts: TemplateOptions) -> str:
        args = self.build_args(opts)
        cmd = self.runner.command(args)
        result = self.runner.run(args)

        if result.returncode != 0:
            raise TemplaterError(
                f'running "{format_command(cmd)}": exit status {result.returncode}: {result.stderr.strip()}',
                cmd, result.stderr,
            )
        if result.stderr:
            raise TemplaterError(
                f'"{format_command(cmd)}" exited with output to stderr: {result.stderr.strip()}',
                cmd, result.stderr,
            )

        logger.debug(f"helm template produced {len(result.stdout)} bytes for {opts.chart}")
        return result.stdout
