#!/usr/bin/env python3
"""
CHARTSMITH NAMESPACE INJECTION
------------------------------
Two deliberately different ways of putting a namespace on manifests:

  * inject_namespace           - strict, single manifest. Refuses to touch a
                                 manifest that already carries a namespace.
  * inject_namespace_into_all  - best-effort backfill over a manifest list.
                                 Fills in missing/null/empty namespaces and
                                 leaves the others alone.

Both mutate the manifest's metadata mapping in place.

Author: Chartsmith Team
Date: 2026-10-19
"""

import logging
from typing import Iterable, List, Optional

from ruamel.yaml.comments import CommentedMap

from chartsmith.core.errors import ManifestShapeError, NamespaceCollisionError
from chartsmith.core.models import DocumentKind, Manifest, document_kind
from chartsmith.manifests.decoder import decode_maps
from chartsmith.manifests.exporter import dump_manifest

logger = logging.getLogger("chartsmith.namespace")


def inject_namespace(manifest: Optional[Manifest], namespace: str) -> Optional[Manifest]:
    """
    Sets metadata.namespace on a manifest that does not have one yet.

    None passes through as None. A missing metadata mapping is created.
    Raises ManifestShapeError when metadata is not a mapping and
    NamespaceCollisionError when a namespace is already set; in both cases
    the manifest is left as it was.
    """
    if manifest is None:
        return None

    if "metadata" in manifest:
        metadata = manifest["metadata"]
        if document_kind(metadata) is not DocumentKind.MAPPING:
            raise ManifestShapeError(
                f"reflecting metadata of yaml manifest: {manifest!r}", metadata
            )
        if metadata.get("namespace") is not None:
            raise NamespaceCollisionError(manifest)
    else:
        metadata = CommentedMap()
        manifest["metadata"] = metadata

    metadata["namespace"] = namespace
    return manifest


def inject_namespace_into_all(manifests: Iterable[Optional[Manifest]],
                              namespace: str) -> List[Optional[Manifest]]:
    """
    Backfills a namespace into every manifest lacking a non-empty one.

    Applying it twice with the same namespace is the same as applying it
    once. None entries pass through. Raises ManifestShapeError if a
    manifest's metadata is set to something other than a mapping.
    """
    result = []
    for manifest in manifests:
        if manifest is None:
            result.append(manifest)
            continue

        metadata = manifest.get("metadata")
        kind = document_kind(metadata)
        if kind is DocumentKind.NULL:
            manifest["metadata"] = CommentedMap([("namespace", namespace)])
        elif kind is not DocumentKind.MAPPING:
            raise ManifestShapeError(
                f'"metadata" of manifest is not a mapping: {manifest!r}', metadata
            )
        elif metadata.get("namespace") in (None, ""):
            metadata["namespace"] = namespace
        else:
            logger.debug(
                f"Keeping namespace {metadata['namespace']!r} on {manifest.get('kind', 'manifest')}"
            )
        result.append(manifest)
    return result


def inject_namespace_text(manifest: str, namespace: str) -> str:
    """
    Backfills a namespace into every document of a YAML stream.

    Null documents are dropped; each manifest is re-encoded and the results
    are joined with '---'.
    """
    manifests = [m for m in decode_maps(manifest) if m is not None]
    injected = inject_namespace_into_all(manifests, namespace)
    return "\n---\n".join(dump_manifest(m) for m in injected).strip()


def namespace_manifest(name: str) -> Manifest:
    """A v1 Namespace manifest for the given name."""
    return CommentedMap([
        ("apiVersion", "v1"),
        ("kind", "Namespace"),
        ("metadata", CommentedMap([("name", name)])),
    ])
