"""Creator files: the saved settings of a package creator.

A creator file is a small TOML document naming the template, the
destination and the package properties:

    [creator]
    template_source = "Templates/PackageTemplate"
    destination = "Packages"

    [package]
    prefix_name = "com.example"
    package_name = "MyTool"
    ...

Relative paths resolve against the folder holding the creator file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from upm_stamp.core.errors import CreatorFileError, CreatorFileNotFoundError
from upm_stamp.core.properties import PROPERTY_GROUPS, PackageProperties
from upm_stamp.core.template import PackageCreator

if TYPE_CHECKING:
    from upm_stamp.config import StampConfig

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_CREATOR_FILENAME",
    "load_creator_data",
    "load_creator_file",
    "build_creator",
    "resolve_creator",
    "render_creator_template",
]

DEFAULT_CREATOR_FILENAME = "package-creator.toml"

_GROUP_TITLES = {
    "identity": "Package Identity",
    "display": "Package Display",
    "editor_origin": "Editor Origin",
    "support_links": "Support Links",
    "author": "Author Info",
}


def load_creator_data(path: Path) -> Dict[str, Any]:
    """Parse a creator file.

    Raises:
        CreatorFileError: When the file is missing or not valid TOML.
    """
    if not path.is_file():
        raise CreatorFileNotFoundError(
            f"Creator file not found: {path}",
            details={"path": str(path)},
        )
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise CreatorFileError(
            f"Creator file is not valid TOML: {path}: {exc}",
            details={"path": str(path)},
        ) from exc

    for section in ("creator", "package"):
        if section in data and not isinstance(data[section], dict):
            raise CreatorFileError(
                f"[{section}] in {path} must be a table",
                details={"path": str(path), "section": section},
            )
    return data


def _resolve(base: Path, value: Optional[str]) -> Optional[Path]:
    if not value:
        return None
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def build_creator(
    *,
    template_source: Optional[Path] = None,
    destination: Optional[Path] = None,
    properties: Optional[PackageProperties] = None,
    config: Optional["StampConfig"] = None,
    regenerate_guids: Optional[bool] = None,
) -> PackageCreator:
    """Create a PackageCreator using the template settings from ``config``."""
    if config is None:
        from upm_stamp.config import get_config

        config = get_config()

    settings = config.template
    return PackageCreator(
        template_source,
        destination,
        properties,
        tokenizable_suffixes=settings.tokenizable_suffixes,
        regenerate_guids=(
            settings.regenerate_guids if regenerate_guids is None else regenerate_guids
        ),
        ignore_names=settings.ignore_names,
    )


def load_creator_file(
    path: Path,
    config: Optional["StampConfig"] = None,
) -> PackageCreator:
    """Build a PackageCreator from a creator file."""
    data = load_creator_data(path)
    base = path.resolve().parent
    creator_cfg = data.get("creator", {})

    regenerate_guids = creator_cfg.get("regenerate_guids")
    if regenerate_guids is not None and not isinstance(regenerate_guids, bool):
        raise CreatorFileError(
            f"regenerate_guids in {path} must be true or false",
            details={"path": str(path), "field": "regenerate_guids"},
        )

    logger.debug("Loaded creator file %s", path)
    return build_creator(
        template_source=_resolve(base, creator_cfg.get("template_source")),
        destination=_resolve(base, creator_cfg.get("destination")),
        properties=PackageProperties.from_toml_dict(data.get("package", {})),
        config=config,
        regenerate_guids=regenerate_guids,
    )


def resolve_creator(
    *,
    creator_file: Optional[Path] = None,
    template_source: Optional[Path] = None,
    destination: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    regenerate_guids: Optional[bool] = None,
    config: Optional["StampConfig"] = None,
) -> PackageCreator:
    """Combine a creator file with explicit overrides.

    Explicit arguments win over values from the creator file. Without a
    creator file the configured default (``UPM_STAMP_CREATOR_FILE``) is
    used when set.

    Raises:
        CreatorFileError: The creator file cannot be read.
        KeyError: An override names an unknown property.
    """
    if config is None:
        from upm_stamp.config import get_config

        config = get_config()

    path = creator_file or config.creator_file
    if path is not None:
        creator = load_creator_file(Path(path), config)
    else:
        creator = build_creator(config=config)

    if template_source is not None:
        creator.template_source = Path(template_source)
    if destination is not None:
        creator.destination = Path(destination)
    if overrides:
        creator.properties = creator.properties.with_overrides(overrides)
    if regenerate_guids is not None:
        creator.regenerate_guids = regenerate_guids
    return creator


_TOML_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _toml_string(value: str) -> str:
    """Basic TOML string; other control characters become ``\\uXXXX``."""
    escaped = "".join(
        _TOML_ESCAPES.get(char)
        or (f"\\u{ord(char):04x}" if ord(char) < 0x20 or ord(char) == 0x7F else char)
        for char in value
    )
    return f'"{escaped}"'


def render_creator_template(
    properties: Optional[PackageProperties] = None,
    *,
    template_source: str = "",
    destination: str = "",
) -> str:
    """Render a creator file, blank by default."""
    properties = properties or PackageProperties()
    required = set(PackageProperties.required_field_names())
    values = properties.to_dict()

    lines: List[str] = [
        "[creator]",
        f"template_source = {_toml_string(template_source)}",
        f"destination = {_toml_string(destination)}",
        "",
        "[package]",
    ]
    for group, names in PROPERTY_GROUPS.items():
        lines.append(f"# {_GROUP_TITLES[group]}")
        for name in names:
            suffix = "" if name in required else "  # optional"
            lines.append(f"{name} = {_toml_string(values[name])}{suffix}")
        lines.append("")
    return "\n".join(lines)
