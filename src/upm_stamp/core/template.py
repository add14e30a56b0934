"""
Package creation from a template folder.

A ``PackageCreator`` copies a template skeleton to
``<destination>/<package_name>``, gives every copied ``.meta`` sidecar a
fresh GUID, rewrites tokens inside allow-listed text files and renames
files and folders whose names contain tokens.

Files that neither hold tokens in their name nor qualify for content
rewriting are copied byte for byte.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from upm_stamp.core.errors import (
    DestinationExistsError,
    InvalidDestinationError,
    PackageNotReadyError,
    RenameConflictError,
    TemplateEmptyError,
)
from upm_stamp.core.guids import META_SUFFIX, regenerate_meta_guids, remap_guids_in_text
from upm_stamp.core.properties import PackageProperties, is_blank
from upm_stamp.core.tokens import (
    DEFAULT_TOKENIZABLE_SUFFIXES,
    contains_tokens,
    is_tokenizable,
    replace_tokens,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_IGNORE_NAMES",
    "ReadinessReport",
    "RenameRecord",
    "PackagePlan",
    "CreationResult",
    "PackageCreator",
]

DEFAULT_IGNORE_NAMES: Tuple[str, ...] = (".git", ".DS_Store", "Thumbs.db")

PathLike = Union[str, os.PathLike]


@dataclass
class ReadinessReport:
    """Outcome of the three readiness checks."""

    template_source_valid: bool
    destination_valid: bool
    properties_valid: bool
    missing_properties: List[str] = field(default_factory=list)
    reasons: List[str] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.template_source_valid and self.destination_valid and self.properties_valid

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["is_ready"] = self.is_ready
        return data


@dataclass
class RenameRecord:
    """A tokenized name and what it resolves to, relative to the package root."""

    source: str
    target: str
    is_dir: bool = False


@dataclass
class PackagePlan:
    """What ``create_package`` would do, computed without writing anything."""

    package_root: str
    package_id: str
    package_namespace: str
    entries: int = 0
    rewrites: List[str] = field(default_factory=list)
    renames: List[RenameRecord] = field(default_factory=list)
    meta_files: int = 0
    skipped: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CreationResult:
    """Summary of a completed package creation."""

    package_root: str
    package_id: str
    package_namespace: str
    rewritten: List[str] = field(default_factory=list)
    renamed: List[RenameRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    guids_regenerated: int = 0
    warnings: List[str] = field(default_factory=list)
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _posix(rel: Path) -> str:
    return PurePosixPath(*rel.parts).as_posix()


class PackageCreator:
    """Stamps out a new package from a template folder.

    Args:
        template_source: Folder holding the package skeleton.
        destination: Existing folder the new package is created in.
        properties: Package metadata used for token replacement.
        tokenizable_suffixes: File extensions whose contents are rewritten.
        regenerate_guids: Give copied ``.meta`` files fresh GUIDs.
        ignore_names: File and folder name globs never copied, e.g. ".git" or "*.bak".
    """

    def __init__(
        self,
        template_source: Optional[PathLike] = None,
        destination: Optional[PathLike] = None,
        properties: Optional[PackageProperties] = None,
        *,
        tokenizable_suffixes: Sequence[str] = DEFAULT_TOKENIZABLE_SUFFIXES,
        regenerate_guids: bool = True,
        ignore_names: Sequence[str] = DEFAULT_IGNORE_NAMES,
    ):
        self.template_source = Path(template_source) if template_source else None
        self.destination = Path(destination) if destination else None
        self.properties = properties or PackageProperties()
        self.tokenizable_suffixes = tuple(tokenizable_suffixes)
        self.regenerate_guids = regenerate_guids
        self.ignore_names = tuple(ignore_names)

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    @property
    def template_source_is_valid(self) -> bool:
        if self.template_source is None or not self.template_source.is_dir():
            return False
        if self.destination is None:
            return True
        return self.template_source.resolve() != self.destination.resolve()

    @property
    def destination_is_valid(self) -> bool:
        return self.destination is not None and not is_blank(str(self.destination))

    @property
    def properties_are_valid(self) -> bool:
        return self.properties.is_valid

    @property
    def is_ready(self) -> bool:
        return (
            self.template_source_is_valid
            and self.destination_is_valid
            and self.properties_are_valid
        )

    def readiness(self) -> ReadinessReport:
        """Run every readiness check and explain the failures."""
        reasons: List[str] = []
        source_ok = self.template_source_is_valid
        if not source_ok:
            if self.template_source is None:
                reasons.append("Template source is not set")
            elif not self.template_source.is_dir():
                reasons.append(f"Template source is not a folder: {self.template_source}")
            else:
                reasons.append("Template source and destination are the same folder")

        destination_ok = self.destination_is_valid
        if not destination_ok:
            reasons.append("Destination is not set")

        missing = self.properties.missing_fields()
        if missing:
            reasons.append(f"Missing package properties: {', '.join(missing)}")

        return ReadinessReport(
            template_source_valid=source_ok,
            destination_valid=destination_ok,
            properties_valid=not missing,
            missing_properties=missing,
            reasons=reasons,
        )

    @property
    def package_root(self) -> Optional[Path]:
        """Where the new package lands, once destination and name are known."""
        if self.destination is None or is_blank(self.properties.package_name):
            return None
        return self.destination / self.properties.package_name

    # ------------------------------------------------------------------
    # Tree walking
    # ------------------------------------------------------------------

    def _is_ignored(self, name: str) -> bool:
        """Glob match against ``ignore_names``, as ``shutil.ignore_patterns`` does."""
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.ignore_names)

    def _copy_ignore(self, directory: str, names: List[str]) -> List[str]:
        return [name for name in names if self._is_ignored(name)]

    def _walk(self, root: Path) -> List[Tuple[Path, bool]]:
        """Relative paths below ``root`` (folders and files), sorted."""
        entries: List[Tuple[Path, bool]] = []
        for current, dirs, files in os.walk(root):
            dirs[:] = sorted(d for d in dirs if not self._is_ignored(d))
            base = Path(current).relative_to(root)
            for name in dirs:
                entries.append((base / name, True))
            for name in sorted(files):
                if self._is_ignored(name):
                    continue
                entries.append((base / name, False))
        entries.sort(key=lambda item: item[0].parts)
        return entries

    def _resolve_rel(self, rel: Path) -> Path:
        return Path(*(replace_tokens(part, self.properties) for part in rel.parts))

    def _collect_renames(self, entries: Iterable[Tuple[Path, bool]]) -> List[RenameRecord]:
        """Compute renames for tokenized names and reject collisions."""
        renames: List[RenameRecord] = []
        finals: Dict[str, str] = {}
        for rel, is_dir in entries:
            final = self._resolve_rel(rel)
            source_key = _posix(rel)
            final_key = _posix(final)

            new_name = final.name if final.parts else ""
            if not new_name.strip(". "):
                raise RenameConflictError(
                    f"'{source_key}' resolves to an empty name",
                    details={"source": source_key},
                )

            other = finals.get(final_key)
            if other is not None:
                raise RenameConflictError(
                    f"'{source_key}' and '{other}' both resolve to '{final_key}'",
                    details={"sources": [other, source_key], "target": final_key},
                )
            finals[final_key] = source_key

            if contains_tokens(rel.name) and new_name != rel.name:
                renames.append(RenameRecord(source_key, final_key, is_dir))
        return renames

    def _read_text(self, path: Path) -> Optional[str]:
        """Read a text file, keeping line endings. None when not UTF-8."""
        try:
            with open(path, "r", encoding="utf-8", newline="") as handle:
                return handle.read()
        except UnicodeDecodeError:
            return None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _check_ready(self) -> Tuple[Path, Path, Path]:
        report = self.readiness()
        if not report.is_ready:
            logger.error(
                "Unable to create new package because the creator is not ready: %s",
                "; ".join(report.reasons),
            )
            raise PackageNotReadyError(
                "Unable to create new package because the creator is not ready",
                details=report.to_dict(),
            )

        assert self.template_source is not None and self.destination is not None
        source = self.template_source.resolve()
        destination = self.destination

        if not destination.is_dir():
            logger.error("Invalid Destination: %s", destination)
            raise InvalidDestinationError(
                f"Invalid Destination: {destination}",
                details={"destination": str(destination)},
            )

        target = (destination / self.properties.package_name).resolve()
        if target == source or source in target.parents:
            raise InvalidDestinationError(
                f"Destination {destination} is inside the template source",
                details={"destination": str(destination), "template_source": str(source)},
            )
        if target.exists():
            raise DestinationExistsError(
                f"Package folder already exists: {target}",
                details={"package_root": str(target)},
            )
        return source, destination, target

    def plan_package(self) -> PackagePlan:
        """Describe the package creation without touching the filesystem.

        Raises:
            PackageCreationError: For the same failures ``create_package`` would hit
                before copying.
        """
        source, _, target = self._check_ready()

        entries = self._walk(source)
        if not entries:
            raise TemplateEmptyError(
                "No child assets found in source template path!",
                details={"template_source": str(source)},
            )

        plan = PackagePlan(
            package_root=str(target),
            package_id=self.properties.package_id,
            package_namespace=self.properties.package_namespace,
            entries=len(entries),
            renames=self._collect_renames(entries),
        )

        for rel, is_dir in entries:
            if is_dir:
                continue
            if rel.name.endswith(META_SUFFIX):
                plan.meta_files += 1
                continue
            if not is_tokenizable(rel, self.tokenizable_suffixes):
                continue
            text = self._read_text(source / rel)
            if text is None:
                plan.skipped.append(_posix(rel))
                plan.warnings.append(f"Not UTF-8, contents left as-is: {_posix(rel)}")
            elif contains_tokens(text):
                plan.rewrites.append(_posix(self._resolve_rel(rel)))

        return plan

    def create_package(self) -> CreationResult:
        """Copy the template and apply token replacement to the copy.

        The copy is removed again when any step, the copy itself included,
        fails or is interrupted.

        Returns:
            CreationResult describing what was rewritten and renamed.

        Raises:
            PackageNotReadyError: A readiness check failed.
            InvalidDestinationError: Destination is missing or inside the template.
            DestinationExistsError: ``<destination>/<package_name>`` already exists.
            TemplateEmptyError: The template has no child assets.
            RenameConflictError: Two assets would resolve to the same name.
        """
        start = time.perf_counter()
        plan = self.plan_package()
        assert self.template_source is not None
        target = Path(plan.package_root)

        logger.info(
            "Creating package %s from %s", plan.package_id, self.template_source
        )
        try:
            shutil.copytree(self.template_source.resolve(), target, ignore=self._copy_ignore)
            result = self._stamp(target, plan)
        except (Exception, KeyboardInterrupt):
            logger.error("Package creation failed, removing %s", target)
            shutil.rmtree(target, ignore_errors=True)
            raise

        result.duration_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "Package created: %s (%d rewritten, %d renamed, %d guids)",
            result.package_root,
            len(result.rewritten),
            len(result.renamed),
            result.guids_regenerated,
        )
        return result

    def _stamp(self, root: Path, plan: PackagePlan) -> CreationResult:
        result = CreationResult(
            package_root=plan.package_root,
            package_id=plan.package_id,
            package_namespace=plan.package_namespace,
            warnings=list(plan.warnings),
        )
        entries = self._walk(root)
        files = [rel for rel, is_dir in entries if not is_dir]
        meta_files = [rel for rel in files if rel.name.endswith(META_SUFFIX)]

        guid_map: Dict[str, str] = {}
        if self.regenerate_guids and meta_files:
            guid_map = regenerate_meta_guids(root / rel for rel in meta_files)
            result.guids_regenerated = len(guid_map)
            for rel in meta_files:
                self._rewrite(root / rel, lambda text: remap_guids_in_text(text, guid_map))

        def transform(text: str) -> str:
            replaced = replace_tokens(text, self.properties)
            return remap_guids_in_text(replaced if replaced is not None else text, guid_map)

        for rel in files:
            if rel.name.endswith(META_SUFFIX):
                continue
            if not is_tokenizable(rel, self.tokenizable_suffixes):
                continue

            changed = self._rewrite(root / rel, transform)
            if changed is None:
                result.skipped.append(_posix(rel))
                logger.warning("Skipping non UTF-8 file: %s", root / rel)
            elif changed:
                result.rewritten.append(_posix(self._resolve_rel(rel)))

        # Deepest first so parents are renamed after their children.
        for record in sorted(
            plan.renames, key=lambda r: len(PurePosixPath(r.source).parts), reverse=True
        ):
            self._rename(root, record)
            result.renamed.append(record)

        result.renamed.sort(key=lambda r: r.source)
        return result

    def _rewrite(self, path: Path, transform: Callable[[str], str]) -> Optional[bool]:
        """Apply ``transform`` to a text file. None if it is not UTF-8."""
        text = self._read_text(path)
        if text is None:
            return None
        updated = transform(text)
        if updated == text:
            return False
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(updated)
        logger.debug("Rewrote %s", path)
        return True

    def _rename(self, root: Path, record: RenameRecord) -> None:
        # Parents are still unrenamed, so only the last component changes.
        current = root / record.source
        new_path = current.with_name(PurePosixPath(record.target).name)
        if new_path.exists():
            raise RenameConflictError(
                f"Cannot rename '{record.source}': '{new_path.name}' already exists",
                details={"source": record.source, "target": record.target},
            )
        current.rename(new_path)
        logger.debug("Renamed %s -> %s", current, new_path)
