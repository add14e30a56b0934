"""
Integration tests for the upm-stamp CLI.

Commands are run through click's CliRunner. Success envelopes are read
from stdout, error envelopes from the last line of stderr.
"""

import json

import pytest
from click.testing import CliRunner

from conftest import RESPONSE_CONTRACT_VERSION, last_json_line
from upm_stamp.cli.main import cli
from upm_stamp.core.creator_file import render_creator_template
from upm_stamp.core.template import PackageCreator

NAMESPACE = "SupaFabulus.Util.Tools.PackageTools"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def creator_file(tmp_path, template_dir, destination, properties):
    """package-creator.toml in the working directory, found automatically."""
    path = tmp_path / "package-creator.toml"
    path.write_text(
        render_creator_template(
            properties,
            template_source="Templates/PackageTemplate",
            destination="Packages",
        ),
        encoding="utf-8",
    )
    return path


def ok(result):
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["success"] is True
    assert payload["meta"]["version"] == RESPONSE_CONTRACT_VERSION
    return payload


def failed(result):
    assert result.exit_code == 1, result.output
    payload = last_json_line(result.stderr)
    assert payload["success"] is False
    return payload


class TestVersion:
    def test_version(self, runner):
        payload = ok(runner.invoke(cli, ["version"]))
        assert payload["data"]["name"] == "upm-stamp"
        assert payload["data"]["json_only"] is True
        assert payload["data"]["creator_file"] is None

    def test_version_reports_creator_file(self, runner, creator_file):
        payload = ok(runner.invoke(cli, ["version"]))
        assert payload["data"]["creator_file"] == "package-creator.toml"


class TestCreatorCommands:
    def test_init_writes_blank_file(self, runner, tmp_path):
        payload = ok(runner.invoke(cli, ["creator", "init"]))
        assert payload["data"] == {"path": "package-creator.toml", "overwritten": False}
        assert "[package]" in (tmp_path / "package-creator.toml").read_text()

    def test_init_refuses_to_overwrite(self, runner, creator_file):
        payload = failed(runner.invoke(cli, ["creator", "init"]))
        assert payload["data"]["error_code"] == "CONFLICT"
        assert "PackageTools" in creator_file.read_text()

    def test_init_force_overwrites(self, runner, creator_file):
        payload = ok(
            runner.invoke(
                cli, ["creator", "init", "--force", "--template", "Templates/Other"]
            )
        )
        assert payload["data"]["overwritten"] is True
        text = creator_file.read_text()
        assert 'template_source = "Templates/Other"' in text
        assert "PackageTools" not in text

    def test_init_custom_path(self, runner, tmp_path):
        ok(runner.invoke(cli, ["creator", "init", "creators/tool.toml"]))
        assert (tmp_path / "creators" / "tool.toml").is_file()

    def test_show_without_file(self, runner):
        payload = failed(runner.invoke(cli, ["creator", "show"]))
        assert payload["data"]["error_code"] == "MISSING_REQUIRED"

    def test_show_reports_readiness(self, runner, creator_file):
        payload = ok(runner.invoke(cli, ["creator", "show"]))
        data = payload["data"]
        assert data["package"]["package_name"] == "PackageTools"
        assert data["readiness"]["is_ready"] is True
        assert data["regenerate_guids"] is True

    def test_show_missing_file(self, runner):
        payload = failed(runner.invoke(cli, ["creator", "show", "nope.toml"]))
        assert payload["data"]["error_code"] == "NOT_FOUND"


class TestValidate:
    def test_not_ready_without_creator(self, runner):
        payload = ok(runner.invoke(cli, ["package", "validate"]))
        data = payload["data"]
        assert data["is_ready"] is False
        assert data["template_source"] is None
        assert "package_name" in data["missing_properties"]

    def test_strict_fails_when_not_ready(self, runner):
        payload = failed(runner.invoke(cli, ["package", "validate", "--strict"]))
        assert payload["data"]["error_code"] == "VALIDATION_ERROR"
        assert payload["data"]["details"]["is_ready"] is False

    def test_ready_with_creator_file(self, runner, creator_file, destination):
        payload = ok(runner.invoke(cli, ["package", "validate", "--strict"]))
        assert payload["data"]["is_ready"] is True
        assert payload["data"]["package_root"].endswith("PackageTools")

    def test_set_can_clear_a_property(self, runner, creator_file):
        payload = ok(
            runner.invoke(cli, ["package", "validate", "--set", "author_url="])
        )
        assert payload["data"]["missing_properties"] == ["author_url"]


class TestTokens:
    def test_lists_tokens_in_order(self, runner, creator_file):
        payload = ok(runner.invoke(cli, ["package", "tokens"]))
        data = payload["data"]
        assert data["package_id"] == "supafabulus.util.tools.packagetools"
        assert data["tokens"][0] == {
            "token": "[PKG_ID]",
            "value": "supafabulus.util.tools.packagetools",
        }
        assert len(data["tokens"]) == 17
        assert "category_name" not in data["required"]

    def test_set_overrides_creator_file(self, runner, creator_file):
        payload = ok(
            runner.invoke(
                cli,
                ["package", "tokens", "--set", "category_name=", "--set", "moduleName=Kit"],
            )
        )
        assert payload["data"]["package_namespace"] == "SupaFabulus.Kit.PackageTools"

    def test_unknown_property(self, runner):
        payload = failed(runner.invoke(cli, ["package", "tokens", "--set", "packge_name=X"]))
        assert payload["data"]["error_code"] == "VALIDATION_ERROR"
        assert payload["data"]["details"]["field"] == "packge_name"

    def test_malformed_assignment(self, runner):
        payload = failed(runner.invoke(cli, ["package", "tokens", "--set", "package_name"]))
        assert payload["data"]["error_code"] == "INVALID_FORMAT"


class TestPlan:
    def test_plan_writes_nothing(self, runner, creator_file, destination):
        payload = ok(runner.invoke(cli, ["package", "plan"]))
        data = payload["data"]
        assert data["dry_run"] is True
        assert data["meta_files"] == 5
        assert "package.json" in data["rewrites"]
        assert list(destination.iterdir()) == []

    def test_plan_reports_not_ready(self, runner):
        payload = failed(runner.invoke(cli, ["package", "plan"]))
        assert payload["data"]["error_code"] == "VALIDATION_ERROR"


class TestCreate:
    def test_creates_package(self, runner, creator_file, destination):
        payload = ok(runner.invoke(cli, ["package", "create"]))
        data = payload["data"]
        root = destination / "PackageTools"

        assert data["package_id"] == "supafabulus.util.tools.packagetools"
        assert "duration_ms" in payload["meta"]["telemetry"]
        assert payload["meta"]["request_id"].startswith("cli_")
        assert json.loads((root / "package.json").read_text())["name"] == data["package_id"]
        assert (root / "Runtime" / f"{NAMESPACE}.asmdef").is_file()

    def test_second_create_conflicts(self, runner, creator_file):
        ok(runner.invoke(cli, ["package", "create"]))
        payload = failed(runner.invoke(cli, ["package", "create"]))
        assert payload["data"]["error_code"] == "CONFLICT"
        assert payload["data"]["remediation"]

    def test_options_without_creator_file(self, runner, template_dir, destination, properties):
        args = ["package", "create", "--template", str(template_dir), "--destination", str(destination)]
        for name, value in properties.to_dict().items():
            args += ["--set", f"{name}={value}"]
        args.append("--no-guids")

        payload = ok(runner.invoke(cli, args))

        assert payload["data"]["guids_regenerated"] == 0
        assert (destination / "PackageTools" / "package.json").is_file()

    def test_missing_destination_folder(self, runner, creator_file, tmp_path):
        payload = failed(
            runner.invoke(
                cli, ["package", "create", "--destination", str(tmp_path / "missing")]
            )
        )
        assert payload["data"]["error_code"] == "INVALID_DESTINATION"
        assert payload["error"].startswith("Invalid Destination")

    def test_explicit_creator_option(self, runner, tmp_path, creator_file, destination):
        moved = tmp_path / "creators" / "tool.toml"
        moved.parent.mkdir()
        moved.write_text(
            creator_file.read_text()
            .replace('"Templates/PackageTemplate"', '"../Templates/PackageTemplate"')
            .replace('"Packages"', '"../Packages"')
        )
        creator_file.unlink()

        ok(runner.invoke(cli, ["--creator", str(moved), "package", "create"]))
        assert (destination / "PackageTools").is_dir()

    def test_config_file_limits_tokenizable_suffixes(
        self, runner, tmp_path, creator_file, destination
    ):
        config = tmp_path / "custom.toml"
        config.write_text('[template]\ntokenizable_suffixes = ["json"]\n')

        ok(runner.invoke(cli, ["--config", str(config), "package", "create"]))

        root = destination / "PackageTools"
        assert "[PKG_DESC]" in (root / "README.md").read_text()
        assert "[PKG_ID]" not in (root / "package.json").read_text()

    def test_interrupt_removes_partial_package(
        self, runner, creator_file, destination, monkeypatch
    ):
        """Ctrl+C mid-create exits 130 and leaves the destination clean."""

        def interrupt(self, root, plan):
            raise KeyboardInterrupt

        monkeypatch.setattr(PackageCreator, "_stamp", interrupt)

        result = runner.invoke(cli, ["package", "create"])

        assert result.exit_code == 130
        payload = last_json_line(result.stderr)
        assert payload["data"]["error_code"] == "CANCELLED"
        assert payload["error"] == "package.create interrupted"
        assert not (destination / "PackageTools").exists()

    def test_filesystem_error_is_reported_and_rolled_back(
        self, runner, creator_file, destination, monkeypatch
    ):
        def deny(self, root, plan):
            raise PermissionError("read-only volume")

        monkeypatch.setattr(PackageCreator, "_stamp", deny)

        result = runner.invoke(cli, ["package", "create"])

        assert result.exit_code == 1
        payload = last_json_line(result.stderr)
        assert payload["data"]["error_code"] == "INTERNAL_ERROR"
        assert payload["error"] == "PermissionError: read-only volume"
        assert payload["meta"]["request_id"] in payload["data"]["remediation"]
        assert not (destination / "PackageTools").exists()
