"""Literal token substitution for template files and asset names.

Tokens are fixed bracketed strings such as ``[PKG_NAME]``. Replacement is
plain substring replacement applied in a fixed order; there is no escaping
and no expression syntax.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Iterable, List, Optional, Tuple, Union

from upm_stamp.core.properties import PackageProperties, is_blank

__all__ = [
    "TOKEN_PACKAGE_ID",
    "TOKEN_PACKAGE_NAMESPACE",
    "TOKEN_ORDER",
    "DEFAULT_TOKENIZABLE_SUFFIXES",
    "token_map",
    "replace_tokens",
    "contains_tokens",
    "find_tokens",
    "file_suffix",
    "is_tokenizable",
]

TOKEN_PACKAGE_ID = "[PKG_ID]"
TOKEN_PACKAGE_NAMESPACE = "[PKG_NAMESPACE]"
TOKEN_PREFIX = "[PKG_PREFIX]"
TOKEN_CATEGORY = "[PKG_CATEGORY]"
TOKEN_MODULE_NAME = "[MODULE_NAME]"
TOKEN_PACKAGE_NAME = "[PKG_NAME]"
TOKEN_DISPLAY_NAME = "[PKG_DISPLAY_NAME]"
TOKEN_DESCRIPTION = "[PKG_DESC]"
TOKEN_PACKAGE_VERSION = "[PKG_VERSION]"
TOKEN_UNITY_VERSION = "[UNITY_VERSION]"
TOKEN_UNITY_RELEASE = "[UNITY_RELEASE]"
TOKEN_URL_DOCS = "[URL_DOCS]"
TOKEN_URL_CHANGELOG = "[URL_CHANGELOG]"
TOKEN_URL_LICENSE = "[URL_LICENSE]"
TOKEN_AUTHOR_NAME = "[AUTHOR_NAME]"
TOKEN_AUTHOR_EMAIL = "[AUTHOR_EMAIL]"
TOKEN_AUTHOR_URL = "[AUTHOR_URL]"

# Replacement order. Composite tokens come first.
_TOKEN_SOURCES: Tuple[Tuple[str, str], ...] = (
    (TOKEN_PACKAGE_ID, "package_id"),
    (TOKEN_PACKAGE_NAMESPACE, "package_namespace"),
    (TOKEN_PREFIX, "prefix_name"),
    (TOKEN_CATEGORY, "category_name"),
    (TOKEN_MODULE_NAME, "module_name"),
    (TOKEN_PACKAGE_NAME, "package_name"),
    (TOKEN_DISPLAY_NAME, "display_name"),
    (TOKEN_DESCRIPTION, "description"),
    (TOKEN_PACKAGE_VERSION, "package_version"),
    (TOKEN_UNITY_VERSION, "unity_editor_version"),
    (TOKEN_UNITY_RELEASE, "unity_editor_release"),
    (TOKEN_URL_DOCS, "documentation_url"),
    (TOKEN_URL_CHANGELOG, "changelog_url"),
    (TOKEN_URL_LICENSE, "license_url"),
    (TOKEN_AUTHOR_NAME, "author_name"),
    (TOKEN_AUTHOR_EMAIL, "author_email"),
    (TOKEN_AUTHOR_URL, "author_url"),
)

TOKEN_ORDER: Tuple[str, ...] = tuple(token for token, _ in _TOKEN_SOURCES)

DEFAULT_TOKENIZABLE_SUFFIXES: Tuple[str, ...] = ("asmdef", "md", "txt", "html", "json")


def token_map(properties: PackageProperties) -> List[Tuple[str, str]]:
    """Ordered (token, value) pairs for the given properties.

    Blank optional values map to the empty string.
    """
    pairs = []
    for token, attribute in _TOKEN_SOURCES:
        value = getattr(properties, attribute)
        pairs.append((token, value or ""))
    return pairs


def replace_tokens(content: Optional[str], properties: PackageProperties) -> Optional[str]:
    """Replace every known token in ``content``.

    Blank content is returned unchanged.
    """
    if is_blank(content):
        return content
    assert content is not None
    for token, value in token_map(properties):
        content = content.replace(token, value)
    return content


def find_tokens(text: Optional[str]) -> List[str]:
    """Known tokens present in ``text``, in replacement order."""
    if not text:
        return []
    return [token for token in TOKEN_ORDER if token in text]


def contains_tokens(text: Optional[str]) -> bool:
    return bool(text) and any(token in text for token in TOKEN_ORDER)


def file_suffix(path: Union[str, PurePath]) -> str:
    """Text after the last dot of the file name, or '' when there is none."""
    name = PurePath(path).name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def is_tokenizable(
    path: Union[str, PurePath],
    suffixes: Iterable[str] = DEFAULT_TOKENIZABLE_SUFFIXES,
) -> bool:
    """Whether the file's contents should go through token replacement.

    Suffixes compare case-insensitively and may be given with or without
    the leading dot.
    """
    suffix = file_suffix(path).lower()
    if not suffix:
        return False
    allowed = {s.lower().lstrip(".") for s in suffixes}
    return suffix in allowed
