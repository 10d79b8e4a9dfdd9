#!/usr/bin/env python3
"""
CHARTSMITH EXPORTER - Round-Trip Encoding
-----------------------------------------
Turns manifests back into a '---' separated YAML stream, with the
conventional Kubernetes top-level key order and comments preserved.

Author: Chartsmith Team
Date: 2026-10-19
"""

import io
from typing import Any, Iterable, Optional, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from chartsmith.core.models import Manifest

PREFERRED_ORDER = ["apiVersion", "kind", "metadata", "spec", "data", "status"]


class ManifestExporter:
    """
    Converts decoded manifests (CommentedMaps or plain dicts) to YAML text.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.preserve_quotes = True
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = PREFERRED_ORDER

    def _ordered(self, data: Any, top_level: bool = False) -> Any:
        """
        Rebuilds mappings with the preferred key order at the top level,
        carrying comment metadata across.
        """
        if isinstance(data, CommentedSeq):
            seq = CommentedSeq(self._ordered(item) for item in data)
            if data.ca.comment:
                seq.ca.comment = data.ca.comment
            for index, comment in data.ca.items.items():
                seq.ca.items[index] = comment
            return seq
        if isinstance(data, list):
            return [self._ordered(item) for item in data]
        if not isinstance(data, dict):
            return data

        keys = list(data.keys())
        if top_level:
            def sort_logic(key):
                if key in self.preferred_order:
                    return self.preferred_order.index(key)
                # Unknown keys keep their relative original position
                return len(self.preferred_order) + keys.index(key)
            keys = sorted(keys, key=sort_logic)

        ordered = CommentedMap()
        if isinstance(data, CommentedMap) and data.ca.comment:
            ordered.ca.comment = data.ca.comment

        for key in keys:
            ordered[key] = self._ordered(data[key])
            if isinstance(data, CommentedMap) and key in data.ca.items:
                ordered.ca.items[key] = data.ca.items[key]

        return ordered

    def dump(self, manifest: Manifest) -> str:
        stream = io.StringIO()
        self.yaml.dump(self._ordered(manifest, top_level=True), stream)
        return stream.getvalue()

    def export(self, manifests: Union[Manifest, Iterable[Optional[Manifest]]]) -> str:
        """
        Exports manifests into a single stream with '---' between documents.
        None entries are skipped.
        """
        docs = [manifests] if isinstance(manifests, dict) else manifests

        stream = io.StringIO()
        written = 0
        for doc in docs:
            if doc is None:
                continue
            if written:
                stream.write("---\n")
            stream.write(self.dump(doc))
            written += 1

        return stream.getvalue()


def dump_manifest(manifest: Manifest) -> str:
    """Encodes one manifest as a YAML document."""
    return ManifestExporter().dump(manifest)
