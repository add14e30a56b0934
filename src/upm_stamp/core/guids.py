"""GUID handling for Unity ``.meta`` sidecar files.

A duplicated asset must not share its GUID with the original, so every
copied ``.meta`` file gets a fresh one and references to the old GUIDs
inside the copy are rewritten.
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "META_SUFFIX",
    "generate_guid",
    "read_meta_guid",
    "regenerate_meta_guids",
    "remap_guids_in_text",
]

META_SUFFIX = ".meta"

# Only the hex run is replaced; trailing blanks and line endings are left as found.
_GUID_LINE = re.compile(r"^(guid:[ \t]*)([0-9a-fA-F]{32})(?=[ \t]*\r?$)", re.MULTILINE)


def generate_guid() -> str:
    """32 lower-case hex characters, the format Unity writes."""
    return uuid.uuid4().hex


def read_meta_guid(text: str) -> Optional[str]:
    match = _GUID_LINE.search(text)
    return match.group(2).lower() if match else None


def remap_guids_in_text(text: str, guid_map: Dict[str, str]) -> str:
    """Replace every occurrence of an old GUID with its new value."""
    if not guid_map:
        return text
    pattern = re.compile("|".join(re.escape(old) for old in guid_map), re.IGNORECASE)
    return pattern.sub(lambda m: guid_map[m.group(0).lower()], text)


def regenerate_meta_guids(meta_files: Iterable[Path]) -> Dict[str, str]:
    """Assign fresh GUIDs to the given ``.meta`` files.

    Files are rewritten in place. Meta files without a ``guid:`` line are
    left alone.

    Returns:
        Mapping of old GUID to new GUID (both lower-case).
    """
    guid_map: Dict[str, str] = {}
    for meta_path in meta_files:
        with open(meta_path, "r", encoding="utf-8", newline="") as handle:
            text = handle.read()
        old = read_meta_guid(text)
        if old is None:
            logger.debug("No guid in %s", meta_path)
            continue
        new = guid_map.setdefault(old, generate_guid())
        updated = _GUID_LINE.sub(lambda m: f"{m.group(1)}{new}", text, count=1)
        with open(meta_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(updated)
    return guid_map
