#!/usr/bin/env python3
"""
CHARTSMITH CORE MODELS
----------------------
Defines the fundamental data structures used across the Chartsmith pipeline.
Decoded documents are plain ruamel.yaml values; these models classify them
and describe the options and records that travel between stages.

Author: Chartsmith Team
Date: 2026-10-19
"""

import re
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# A Manifest is a decoded mapping document (dict or ruamel CommentedMap)
Manifest = Dict[str, Any]


class DocumentKind(Enum):
    """The four shapes a decoded YAML document can take."""
    NULL = "null"
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def document_kind(value: Any) -> DocumentKind:
    """
    Narrows a decoded value to its DocumentKind.

    CommentedMap and CommentedSeq subclass dict and list, so both the
    round-trip and the safe loaders classify the same way.
    """
    if value is None:
        return DocumentKind.NULL
    if isinstance(value, dict):
        return DocumentKind.MAPPING
    if isinstance(value, list):
        return DocumentKind.SEQUENCE
    return DocumentKind.SCALAR


@dataclass
class TemplateOptions:
    """
    The options for a single `helm template` invocation.

    helm template --repo <repo> --version <version>
                  --namespace <namespace> --create-namespace
                  --set <set[0]> ... --values <values[0]> ...
                  <release> <chart>
    """
    release: str = ""                  # [NAME]
    chart: str = ""                    # [CHART], a path or a chart reference
    repo: str = ""                     # --repo
    version: str = ""                  # --version
    namespace: str = ""                # --namespace, implies --create-namespace
    values: List[str] = field(default_factory=list)  # --values files
    set: List[str] = field(default_factory=list)     # --set key=value overrides


@dataclass
class RenderContext:
    """
    The record of one orchestrated render.

    Filled in stage by stage by the RenderEngine; the chart path of a pulled
    chart points into a scratch directory that no longer exists once the
    render returns.
    """
    options: TemplateOptions
    chart_path: str = ""
    crd_files: List[str] = field(default_factory=list)
    templated: str = ""
    manifests: List[Manifest] = field(default_factory=list)


@dataclass
class BuildInfo:
    """Parsed output of `helm version`."""
    version: str = ""
    git_commit: str = ""
    git_tree_state: str = ""
    go_version: str = ""

    SEMVER_PATTERN = re.compile(r'(?i)v(\d+)\.(\d+)\.(\d+)')

    def semver(self) -> Optional[Tuple[int, int, int]]:
        """Returns (major, minor, fix) or None when the version is unparseable."""
        match = self.SEMVER_PATTERN.search(self.version)
        if not match:
            return None
        major, minor, fix = (int(group) for group in match.groups())
        return major, minor, fix

    def is_helm3(self) -> bool:
        return self.version.lower().startswith("v3.")

    def is_helm2(self) -> bool:
        return self.version.lower().startswith("v2.")
