"""Package metadata fields used to stamp out a new package.

The fields mirror a Unity ``package.json`` plus the naming parts used to
build the package ID and namespace.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional

__all__ = [
    "PackageProperties",
    "PROPERTY_GROUPS",
    "is_blank",
]


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not str(value).strip()


def _prop(alias: str, *, required: bool = True, multiline: bool = False) -> Any:
    return field(
        default="",
        metadata={"alias": alias, "required": required, "multiline": multiline},
    )


@dataclass
class PackageProperties:
    """Metadata for the package being created.

    ``category_name`` and ``module_name`` are optional; every other field
    must be non-blank before a package can be created.
    """

    # Package identity
    prefix_name: str = _prop("prefixName")
    category_name: str = _prop("categoryName", required=False)
    module_name: str = _prop("moduleName", required=False)
    package_name: str = _prop("packageName")
    package_version: str = _prop("packageVersion")

    # Package display
    display_name: str = _prop("displayName")
    description: str = _prop("description", multiline=True)

    # Editor origin
    unity_editor_version: str = _prop("unityEditorVersion")
    unity_editor_release: str = _prop("unityEditorRelease")

    # Support links
    documentation_url: str = _prop("documentationURL")
    changelog_url: str = _prop("changeLogURL")
    license_url: str = _prop("licenseURL")

    # Author info
    author_name: str = _prop("authorName")
    author_email: str = _prop("authorEMail")
    author_url: str = _prop("authorURL")

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def required_field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.metadata.get("required", True)]

    @classmethod
    def _aliases(cls) -> Dict[str, str]:
        aliases = {}
        for f in fields(cls):
            aliases[f.name] = f.name
            aliases[f.metadata["alias"]] = f.name
        return aliases

    @classmethod
    def resolve_key(cls, key: str) -> Optional[str]:
        """Map a snake_case name or camelCase alias to the field name."""
        return cls._aliases().get(key)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PackageProperties":
        """Create properties from a dict, ignoring unknown keys.

        Both the snake_case field names and the camelCase names used by the
        editor asset (``prefixName``, ``authorEMail``...) are accepted.
        """
        aliases = cls._aliases()
        values: Dict[str, str] = {}
        for key, value in data.items():
            name = aliases.get(key)
            if name is None or value is None:
                continue
            values[name] = str(value)
        return cls(**values)

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "PackageProperties":
        """Create properties from a TOML dict (typically the [package] section)."""
        return cls.from_mapping(data)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "PackageProperties":
        """Return a copy with the given fields replaced."""
        merged = self.to_dict()
        for key, value in overrides.items():
            name = self.resolve_key(key)
            if name is None:
                raise KeyError(key)
            merged[name] = "" if value is None else str(value)
        return PackageProperties(**merged)

    def to_dict(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in self.field_names()}

    def missing_fields(self) -> List[str]:
        """Required fields that are blank, in declaration order."""
        return [
            name for name in self.required_field_names() if is_blank(getattr(self, name))
        ]

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields()

    @property
    def package_namespace(self) -> str:
        """Dotted namespace: prefix[.category][.module].package_name."""
        parts = [self.prefix_name]
        if not is_blank(self.category_name):
            parts.append(self.category_name)
        if not is_blank(self.module_name):
            parts.append(self.module_name)
        parts.append(self.package_name)
        return ".".join(parts)

    @property
    def package_id(self) -> str:
        """Package manager ID, the lower-cased namespace."""
        return self.package_namespace.lower()


PROPERTY_GROUPS: Dict[str, List[str]] = {
    "identity": [
        "prefix_name",
        "category_name",
        "module_name",
        "package_name",
        "package_version",
    ],
    "display": ["display_name", "description"],
    "editor_origin": ["unity_editor_version", "unity_editor_release"],
    "support_links": ["documentation_url", "changelog_url", "license_url"],
    "author": ["author_name", "author_email", "author_url"],
}
"""Field grouping used when rendering creator files."""
