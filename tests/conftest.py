"""
Root pytest configuration and shared fixtures.

Provides a realistic package template tree, package properties and
helpers for reading response envelopes.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

import pytest
from mcp.types import TextContent

from upm_stamp.config import set_config
from upm_stamp.core.context import correlation_id_var
from upm_stamp.core.properties import PackageProperties

# Response contract version from responses.py
RESPONSE_CONTRACT_VERSION = "response-v2"

RUNTIME_GUID = "b" * 32
EDITOR_GUID = "c" * 32
PACKAGE_JSON_GUID = "a" * 32

PACKAGE_JSON = """{
  "name": "[PKG_ID]",
  "version": "[PKG_VERSION]",
  "displayName": "[PKG_DISPLAY_NAME]",
  "description": "[PKG_DESC]",
  "unity": "[UNITY_VERSION]",
  "unityRelease": "[UNITY_RELEASE]",
  "documentationUrl": "[URL_DOCS]",
  "changelogUrl": "[URL_CHANGELOG]",
  "licensesUrl": "[URL_LICENSE]",
  "author": {
    "name": "[AUTHOR_NAME]",
    "email": "[AUTHOR_EMAIL]",
    "url": "[AUTHOR_URL]"
  }
}
"""

PLACEHOLDER_CS = "namespace [PKG_NAMESPACE]\n{\n    public class Placeholder {}\n}\n"

ICON_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR[PKG_NAME]"


def meta_text(guid: str, folder: bool = False) -> str:
    lines = ["fileFormatVersion: 2", f"guid: {guid}"]
    if folder:
        lines.append("folderAsset: yes")
    lines.append("DefaultImporter:\n  externalObjects: {}\n  userData: ")
    return "\n".join(lines) + "\n"


def extract_response_dict(result: Union[Dict[str, Any], TextContent]) -> Dict[str, Any]:
    """Extract dict from tool result, handling both dict and TextContent.

    Tools wrapped with canonical_tool return TextContent with minified JSON.
    """
    if isinstance(result, dict):
        return result
    if isinstance(result, TextContent):
        return json.loads(result.text)
    raise TypeError(f"Expected dict or TextContent, got {type(result).__name__}")


def last_json_line(text: str) -> Dict[str, Any]:
    """Parse the last line of CLI output as a response envelope."""
    lines = [line for line in text.strip().splitlines() if line.strip()]
    return json.loads(lines[-1])


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Run each test in a clean working directory with default config."""
    for key in list(os.environ):
        if key.startswith("UPM_STAMP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    set_config(None)
    reset_token = correlation_id_var.set("")
    yield
    correlation_id_var.reset(reset_token)
    set_config(None)
    root_logger = logging.getLogger("upm_stamp")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


@pytest.fixture
def properties() -> PackageProperties:
    return PackageProperties(
        prefix_name="SupaFabulus",
        category_name="Util",
        module_name="Tools",
        package_name="PackageTools",
        package_version="1.2.0",
        display_name="Package Tools",
        description="Tools for authoring packages.",
        unity_editor_version="2022.3",
        unity_editor_release="10f1",
        documentation_url="https://example.com/docs",
        changelog_url="https://example.com/changelog",
        license_url="https://example.com/license",
        author_name="Jane Doe",
        author_email="jane@example.com",
        author_url="https://example.com",
    )


@pytest.fixture
def template_dir(tmp_path) -> Path:
    """A Unity package skeleton with tokenized names and contents."""
    root = tmp_path / "Templates" / "PackageTemplate"
    runtime = root / "Runtime"
    editor = root / "Editor"
    docs = root / "Documentation~"
    for folder in (runtime, editor, docs, root / ".git"):
        folder.mkdir(parents=True)

    (root / "package.json").write_text(PACKAGE_JSON, encoding="utf-8")
    (root / "package.json.meta").write_text(meta_text(PACKAGE_JSON_GUID), encoding="utf-8")
    (root / "README.md").write_bytes(b"# [PKG_DISPLAY_NAME]\r\n\r\n[PKG_DESC]\r\n")
    (root / "icon.png").write_bytes(ICON_BYTES)
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")

    (root / "Runtime.meta").write_text(meta_text("d" * 32, folder=True), encoding="utf-8")
    (runtime / "[PKG_NAMESPACE].asmdef").write_text(
        '{\n  "name": "[PKG_NAMESPACE]",\n  "rootNamespace": "[PKG_NAMESPACE]"\n}\n',
        encoding="utf-8",
    )
    (runtime / "[PKG_NAMESPACE].asmdef.meta").write_text(
        meta_text(RUNTIME_GUID), encoding="utf-8"
    )
    (runtime / "Placeholder.cs").write_text(PLACEHOLDER_CS, encoding="utf-8")

    (root / "Editor.meta").write_text(meta_text("e" * 32, folder=True), encoding="utf-8")
    (editor / "[PKG_NAMESPACE].Editor.asmdef").write_text(
        '{\n  "name": "[PKG_NAMESPACE].Editor",\n'
        f'  "references": ["GUID:{RUNTIME_GUID}"]\n}}\n',
        encoding="utf-8",
    )
    (editor / "[PKG_NAMESPACE].Editor.asmdef.meta").write_text(
        meta_text(EDITOR_GUID), encoding="utf-8"
    )

    (docs / "[PKG_NAME].md").write_text(
        "# [PKG_DISPLAY_NAME]\n\nInstall `[PKG_ID]`.\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def destination(tmp_path) -> Path:
    dest = tmp_path / "Packages"
    dest.mkdir()
    return dest
