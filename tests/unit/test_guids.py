"""Tests for .meta GUID regeneration."""

from conftest import meta_text
from upm_stamp.core.guids import (
    generate_guid,
    read_meta_guid,
    regenerate_meta_guids,
    remap_guids_in_text,
)

OLD = "0123456789abcdef0123456789abcdef"


def test_generate_guid_format():
    guid = generate_guid()
    assert len(guid) == 32
    assert guid == guid.lower()
    int(guid, 16)
    assert generate_guid() != guid


def test_read_meta_guid():
    assert read_meta_guid(meta_text(OLD)) == OLD
    assert read_meta_guid(meta_text(OLD.upper())) == OLD
    assert read_meta_guid("fileFormatVersion: 2\n") is None


def test_remap_is_case_insensitive():
    new = "f" * 32
    text = f"GUID:{OLD} and guid: {OLD.upper()}"
    assert remap_guids_in_text(text, {OLD: new}) == f"GUID:{new} and guid: {new}"


def test_remap_with_empty_map_is_noop():
    assert remap_guids_in_text(f"GUID:{OLD}", {}) == f"GUID:{OLD}"


def test_regenerate_rewrites_files(tmp_path):
    first = tmp_path / "a.meta"
    second = tmp_path / "b.meta"
    first.write_bytes(meta_text(OLD).replace("\n", "\r\n").encode())
    second.write_text(meta_text("1" * 32))

    guid_map = regenerate_meta_guids([first, second])

    assert set(guid_map) == {OLD, "1" * 32}
    assert read_meta_guid(first.read_text()) == guid_map[OLD]
    assert first.read_bytes() == meta_text(guid_map[OLD]).replace("\n", "\r\n").encode()
    assert read_meta_guid(second.read_text()) == guid_map["1" * 32]


def test_shared_guid_maps_to_one_new_value(tmp_path):
    first = tmp_path / "a.meta"
    second = tmp_path / "b.meta"
    first.write_text(meta_text(OLD))
    second.write_text(meta_text(OLD))

    guid_map = regenerate_meta_guids([first, second])

    assert read_meta_guid(first.read_text()) == read_meta_guid(second.read_text())
    assert len(guid_map) == 1


def test_meta_without_guid_is_left_alone(tmp_path):
    meta = tmp_path / "odd.meta"
    meta.write_text("fileFormatVersion: 2\n")
    assert regenerate_meta_guids([meta]) == {}
    assert meta.read_text() == "fileFormatVersion: 2\n"


def test_crlf_and_trailing_blanks_survive(tmp_path):
    meta = tmp_path / "c.meta"
    original = f"fileFormatVersion: 2\r\nguid: {OLD}  \r\n\r\nDefaultImporter:\r\n"
    meta.write_bytes(original.encode())

    guid_map = regenerate_meta_guids([meta])

    data = meta.read_bytes()
    assert data.count(b"\r\n") == original.count("\r\n")
    assert data == original.replace(OLD, guid_map[OLD]).encode()
