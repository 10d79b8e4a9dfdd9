"""
Error hierarchy for Chartsmith.

Every stage raises one of these and lets it propagate; the only stages that
drop input without raising are clean_manifest and inject_namespace_into_all.
"""

from typing import Any, List, Optional


class ChartsmithError(Exception):
    """Base class for every error raised by Chartsmith."""


class ManifestSyntaxError(ChartsmithError):
    """A document in a YAML stream failed to parse."""

    def __init__(self, raw: str, problem: str = ""):
        self.raw = raw
        self.problem = problem
        message = f"decoding yaml in yaml document {raw}"
        if problem:
            message = f"{message}: {problem}"
        super().__init__(message)


class ManifestShapeError(ChartsmithError):
    """A decoded value is not a mapping where a mapping is required."""

    def __init__(self, message: str, value: Any = None):
        self.value = value
        super().__init__(message)


class NamespaceCollisionError(ChartsmithError):
    """Strict namespace injection found a namespace already set."""

    def __init__(self, manifest: Any):
        self.manifest = manifest
        super().__init__(f"existing namespace found in yaml: {manifest!r}")


class CollaboratorError(ChartsmithError):
    """
    A helm invocation failed.

    Carries the command line and whatever the process wrote to stderr.
    """

    def __init__(self, message: str, command: Optional[List[str]] = None, stderr: str = ""):
        self.command = command or []
        self.stderr = stderr
        super().__init__(message)


class HelmNotFoundError(CollaboratorError):
    """The helm binary could not be executed."""


class TemplaterError(CollaboratorError):
    """`helm template` failed or wrote to stderr."""


class RepositoryError(CollaboratorError):
    """`helm repo list` failed or returned unreadable output."""


class ChartFetchError(CollaboratorError):
    """`helm pull` failed."""


class RenderError(ChartsmithError):
    """
    A stage of the render pipeline failed for a chart.

    The underlying error is chained as __cause__.
    """

    def __init__(self, stage: str, chart: str, message: str):
        self.stage = stage
        self.chart = chart
        super().__init__(f"{stage}: {message}")
