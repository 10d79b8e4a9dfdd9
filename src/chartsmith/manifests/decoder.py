#!/usr/bin/env python3
"""
CHARTSMITH DECODER - Multi-Document YAML
----------------------------------------
Decodes a stream of zero or more '---' separated YAML documents into
round-trip values, and projects those values onto manifests (mappings).

Decoding is all-or-nothing: the first document that fails to parse aborts
the whole call and no partial result is returned.

Author: Chartsmith Team
Date: 2026-10-19
"""

import logging
from typing import Any, List, Optional, Union

from ruamel.yaml import YAML, YAMLError

from chartsmith.core.errors import ManifestShapeError, ManifestSyntaxError
from chartsmith.core.models import DocumentKind, Manifest, document_kind

logger = logging.getLogger("chartsmith.decoder")


def _loader() -> YAML:
    """A fresh round-trip loader; YAML instances are not shared between calls."""
    yaml = YAML(typ='rt')
    yaml.preserve_quotes = True
    return yaml


def _as_text(doc: Union[bytes, str, None]) -> str:
    if doc is None:
        return ""
    if isinstance(doc, bytes):
        # BOM-aware, same as reading manifests from disk
        return doc.decode("utf-8-sig")
    return doc


def decode(doc: Union[bytes, str, None]) -> List[Any]:
    """
    Decodes a single or multi-document YAML body into a list of values.

    An empty body yields an empty list; a body of just '---' yields [None].
    Raises ManifestSyntaxError if any document fails to parse.
    """
    try:
        text = _as_text(doc)
    except UnicodeDecodeError as e:
        raise ManifestSyntaxError(doc.decode("utf-8", errors="replace"), str(e)) from e

    values: List[Any] = []
    try:
        for value in _loader().load_all(text):
            values.append(value)
    except (YAMLError, ValueError, TypeError) as e:
        # ValueError/TypeError come from value construction, e.g. impossible dates
        raise ManifestSyntaxError(text, str(e)) from e

    logger.debug(f"Decoded {len(values)} document(s)")
    return values


def decode_maps(doc: Union[bytes, str, None]) -> List[Optional[Manifest]]:
    """
    Decodes a single or multi-document YAML body into a list of mappings.

    Null documents are kept as None placeholders so the output lines up with
    the documents in the body. Any scalar or sequence document fails the
    whole batch with ManifestShapeError.
    """
    maps: List[Optional[Manifest]] = []
    for value in decode(doc):
        kind = document_kind(value)
        if kind is DocumentKind.NULL:
            maps.append(None)
        elif kind is DocumentKind.MAPPING:
            maps.append(value)
        else:
            raise ManifestShapeError(
                f"unable to reflect {kind.value} value {value!r} as a mapping", value
            )
    return maps
