#!/usr/bin/env python3
"""
CHARTSMITH ENGINE - The Render Orchestrator
-------------------------------------------
The RenderEngine drives a chart through the render pipeline:

  1. Resolve  - use a local chart path, or pull the chart into a scratch dir
  2. Collect  - read the untemplated documents in the chart's "crds" dir
  3. Template - run the templater collaborator on the resolved chart
  4. Merge    - prepend the CRD documents to the templated output
  5. Decode   - decode to manifests and drop null documents

Helm 3 installs the "crds" directory on `helm install` but never prints it
from `helm template`; merging it back gives the complete output of a chart.

Author: Chartsmith Team
Date: 2026-10-19
"""

import os
import logging
import tempfile
from dataclasses import replace
from typing import List, Optional, Protocol

from chartsmith.core.config import Settings
from chartsmith.core.errors import ChartsmithError, RenderError
from chartsmith.core.models import Manifest, RenderContext, TemplateOptions
from chartsmith.helm.pull import HelmPuller
from chartsmith.helm.runner import HelmRunner
from chartsmith.helm.template import HelmTemplater
from chartsmith.manifests.decoder import decode_maps
from chartsmith.manifests.namespace import inject_namespace_into_all, namespace_manifest

DIVIDER = "\n---\n"


class Templater(Protocol):
    def template(self, opts: TemplateOptions) -> str: ...


class ChartFetcher(Protocol):
    def pull(self, repo_url: str, chart: str, version: str, into: str) -> None: ...


class RenderEngine:
    """
    Composes the templater and chart fetcher collaborators with the
    manifest decoder. Holds no per-render state, so one engine can serve
    concurrent renders.
    """

    def __init__(self, templater: Optional[Templater] = None,
                 fetcher: Optional[ChartFetcher] = None,
                 settings: Optional[Settings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or Settings()
        self.logger = logger or logging.getLogger("chartsmith.engine")

        if templater is None or fetcher is None:
            runner = HelmRunner(self.settings.helm_binary)
            templater = templater or HelmTemplater(runner)
            fetcher = fetcher or HelmPuller(runner)

        self.templater = templater
        self.fetcher = fetcher

    def render(self, opts: TemplateOptions, include_namespace: bool = False,
               backfill_namespace: bool = False) -> RenderContext:
        """
        Renders a chart together with its CRDs and returns the full record.

        Raises RenderError tagged with the failing stage ("fetch", "crds",
        "template" or "decode").
        """
        context = RenderContext(options=opts)

        if opts.repo:
            with tempfile.TemporaryDirectory(prefix="chartsmith") as scratch:
                self._fetch(opts, scratch)
                self._render_chart(context, os.path.join(scratch, opts.chart))
        else:
            self._render_chart(context, opts.chart)

        if backfill_namespace and opts.namespace:
            context.manifests = inject_namespace_into_all(context.manifests, opts.namespace)
        if include_namespace and opts.namespace:
            context.manifests.insert(0, namespace_manifest(opts.namespace))

        self.logger.info(f"Rendered {len(context.manifests)} manifest(s) from {opts.chart}")
        return context

    def render_with_auxiliaries(self, opts: TemplateOptions) -> List[Manifest]:
        """Templated manifests of a chart, preceded by its CRD documents."""
        return self.render(opts).manifests

    def _fetch(self, opts: TemplateOptions, into: str) -> None:
        label = f"{opts.chart}@{opts.version}" if opts.version else opts.chart
        self.logger.info(f"Pulling helm chart {label} from {opts.repo}")
        try:
            self.fetcher.pull(opts.repo, opts.chart, opts.version, into)
        except ChartsmithError as e:
            raise RenderError(
                "fetch", opts.chart, f"pulling helm chart {label} from {opts.repo}: {e}"
            ) from e

    def _render_chart(self, context: RenderContext, chart_path: str) -> None:
        opts = context.options
        context.chart_path = chart_path

        crds = self.collect_crds(chart_path, context)

        # Zero out the repo so the templater does not resolve it again
        template_opts = replace(opts, repo="", chart=chart_path)
        try:
            context.templated = self.templater.template(template_opts)
        except ChartsmithError as e:
            raise RenderError(
                "template", chart_path, f"templating helm chart at {chart_path}: {e}"
            ) from e

        unified = DIVIDER.join(crds + [context.templated]).strip()
        try:
            maps = decode_maps(unified)
        except ChartsmithError as e:
            raise RenderError(
                "decode", chart_path, f'parsing output of "helm template" for {chart_path}: {e}'
            ) from e

        context.manifests = [m for m in maps if m is not None]

    def collect_crds(self, chart_path: str,
                     context: Optional[RenderContext] = None) -> List[str]:
        """
        Reads every CRD file below <chart_path>/crds, one string per file.

        Directories and files are visited in sorted order. A missing crds
        directory yields no documents.
        """
        crd_path = os.path.join(chart_path, self.settings.crd_dirname)
        try:
            if not os.path.isdir(crd_path):
                os.stat(crd_path)
                return []
        except FileNotFoundError:
            return []
        except OSError as e:
            raise RenderError(
                "crds", chart_path, f"reading helm chart CRD directory {crd_path}: {e}"
            ) from e

        def on_walk_error(err: OSError):
            raise err

        crds = []
        try:
            for root, dirs, files in os.walk(crd_path, onerror=on_walk_error):
                dirs.sort()
                for name in sorted(files):
                    if not self.settings.is_crd_file(name):
                        continue
                    path = os.path.join(root, name)
                    crds.append(self._read_crd(chart_path, path))
                    if context is not None:
                        context.crd_files.append(path)
        except OSError as e:
            raise RenderError(
                "crds", chart_path, f"walking CRD path {crd_path}: {e}"
            ) from e

        self.logger.debug(f"Collected {len(crds)} CRD file(s) from {crd_path}")
        return crds

    def _read_crd(self, chart_path: str, path: str) -> str:
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise RenderError("crds", chart_path, f"reading CRD file {path}: {e}") from e
        try:
            decode_maps(content)
        except ChartsmithError as e:
            raise RenderError("crds", chart_path, f"reading CRD file {path}: {e}") from e
        return content
