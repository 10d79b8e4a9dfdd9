#!/usr/bin/env python3
"""
CHARTSMITH CLI
--------------
Command-line front end for the render pipeline. Rendered YAML goes to
stdout so it can be piped to kubectl; headers, tables and errors go to
stderr through rich.

Author: Chartsmith Team
Date: 2026-10-19
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chartsmith.core.config import Settings
from chartsmith.core.engine import RenderEngine
from chartsmith.core.errors import ChartsmithError
from chartsmith.core.log import configure_logging, echo
from chartsmith.core.models import TemplateOptions
from chartsmith.helm.runner import HelmRunner
from chartsmith.helm.version import helm_version
from chartsmith.manifests.cleaner import clean_manifest
from chartsmith.manifests.exporter import ManifestExporter
from chartsmith.manifests.namespace import inject_namespace_text

VERSION = "0.1.0"

# Diagnostics only; stdout is reserved for YAML output
console = Console(stderr=True)


class ChartsmithCLI:
    """
    Translates user commands into engine and manifest operations.
    """

    def __init__(self, settings: Optional[Settings] = None, out=None):
        self.settings = settings or Settings.from_env()
        self.out = out or sys.stdout
        self.parser = argparse.ArgumentParser(
            prog="chartsmith",
            description="Chartsmith - render helm charts together with their CRDs",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-v", "--version", action="version", version=f"chartsmith v{VERSION}")
        self.parser.add_argument("--debug", action="store_true", help="Enable debug logging")
        self.parser.add_argument("--helm", default=None, help="helm binary to use (default: $CHARTSMITH_HELM or 'helm')")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        # 'template' - helm template plus the chart's crds directory
        template_parser = subparsers.add_parser("template", help="Render a chart and its CRDs")
        template_parser.add_argument("chart", help="Chart path, or chart name when --repo is given")
        template_parser.add_argument("--release", default="", help="Release name")
        template_parser.add_argument("--repo", default="", help="Chart repository URL")
        template_parser.add_argument("--version", dest="chart_version", default="", help="Chart version constraint")
        template_parser.add_argument("-n", "--namespace", default="", help="Target namespace")
        template_parser.add_argument("-f", "--values", action="append", default=[], help="Values file (repeatable)")
        template_parser.add_argument("--set", action="append", default=[], help="key=value override (repeatable)")
        template_parser.add_argument("--backfill-namespace", action="store_true",
                                     help="Set --namespace on every manifest that lacks one")
        template_parser.add_argument("--create-namespace", action="store_true",
                                     help="Prepend a Namespace manifest for --namespace")

        # 'clean' - drop fragments that are not YAML mappings
        clean_parser = subparsers.add_parser("clean", help="Drop non-mapping documents from a YAML file")
        clean_parser.add_argument("path", help="Path to a YAML file")

        # 'inject-namespace' - best-effort namespace backfill
        inject_parser = subparsers.add_parser("inject-namespace", help="Backfill a namespace into a YAML file")
        inject_parser.add_argument("path", help="Path to a YAML file")
        inject_parser.add_argument("namespace", help="Namespace to set")

        subparsers.add_parser("helm-version", help="Show the helm client version")

    def print_header(self, subtitle: str):
        console.print(Panel.fit(
            f"[bold cyan]Chartsmith v{VERSION}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _write(self, text: str):
        self.out.write(text if text.endswith("\n") else text + "\n")

    def _read(self, path: str) -> str:
        target = Path(path)
        if not target.is_file():
            raise ChartsmithError(f"Path '{path}' not found.")
        return target.read_text(encoding='utf-8-sig')

    def cmd_template(self, args: argparse.Namespace):
        opts = TemplateOptions(
            release=args.release,
            chart=args.chart,
            repo=args.repo,
            version=args.chart_version,
            namespace=args.namespace,
            values=args.values,
            set=args.set,
        )
        echo(0, f"Rendering {opts.chart}")
        engine = RenderEngine(settings=self.settings)
        context = engine.render(
            opts,
            include_namespace=args.create_namespace,
            backfill_namespace=args.backfill_namespace,
        )
        for crd in context.crd_files:
            echo(1, f"merged CRD {Path(crd).name}")
        self._write(ManifestExporter().export(context.manifests))

    def cmd_clean(self, args: argparse.Namespace):
        self._write(clean_manifest(self._read(args.path)))

    def cmd_inject_namespace(self, args: argparse.Namespace):
        self._write(inject_namespace_text(self._read(args.path), args.namespace))

    def cmd_helm_version(self, args: argparse.Namespace):
        info = helm_version(HelmRunner(self.settings.helm_binary))
        table = Table(title="helm version", header_style="bold magenta")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Version", info.version)
        table.add_row("GitCommit", info.git_commit)
        table.add_row("GitTreeState", info.git_tree_state)
        table.add_row("GoVersion", info.go_version)
        console.print(table)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point. Returns the process exit code."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Helm Chart Renderer")
            self.parser.print_help()
            return 0

        args = self.parser.parse_args(argv)
        if args.helm:
            self.settings.helm_binary = args.helm
        configure_logging(logging.DEBUG if args.debug else self.settings.log_level, console=console)

        handlers = {
            "template": self.cmd_template,
            "clean": self.cmd_clean,
            "inject-namespace": self.cmd_inject_namespace,
            "helm-version": self.cmd_helm_version,
        }
        handler = handlers.get(args.command)
        if handler is None:
            self.parser.print_help()
            return 0

        try:
            handler(args)
        except ChartsmithError as e:
            console.print(Panel(str(e), title="[bold red]Error[/bold red]", border_style="red", expand=False))
            return 1
        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(ChartsmithCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
