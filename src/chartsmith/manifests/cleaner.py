"""
Best-effort sanitizer for '---' separated YAML text.

clean_manifest splits on the plain string "\\n---" rather than on YAML
document boundaries, so a block scalar containing a line starting with
'---' is split as well. Surviving fragments are not guaranteed to be valid
manifests; decode them with decode_maps when correctness matters.
"""

import logging

from ruamel.yaml import YAML, YAMLError

from chartsmith.core.models import DocumentKind, document_kind

logger = logging.getLogger("chartsmith.cleaner")

DIVIDER = "\n---"


def _is_mapping_fragment(fragment: str) -> bool:
    """True when the first document of the fragment is a mapping or null."""
    yaml = YAML(typ='safe')
    try:
        first = next(iter(yaml.load_all(fragment)), None)
    except (YAMLError, ValueError, TypeError):
        return False
    return document_kind(first) in (DocumentKind.NULL, DocumentKind.MAPPING)


def clean_manifest(manifest: str) -> str:
    """
    Removes fragments that are not YAML mappings, plus empty fragments.

    Fragments that survive are re-joined untouched, and the joined text is
    trimmed.
    """
    cleaned = []
    for entry in manifest.split(DIVIDER):
        if not _is_mapping_fragment(entry):
            logger.debug(f"Dropping non-mapping fragment: {entry.strip()[:60]!r}")
            continue
        if entry.strip():
            cleaned.append(entry)

    return DIVIDER.join(cleaned).strip()
