"""Unit tests for photostamp/logos.py."""

import json

import pytest
from PIL import Image

from photostamp.image_io import DecodeError
from photostamp.logos import LogoLibrary, LogoLibraryManager, LogoStorageError
from photostamp.placement import PlacementStore


@pytest.fixture
def logo_file(tmp_path):
    path = tmp_path / "brand.png"
    Image.new("RGBA", (40, 20), (0, 0, 255, 255)).save(path)
    return path


@pytest.fixture
def library(tmp_path):
    return LogoLibrary(tmp_path / "logos")


class TestLogoLibrary:
    def test_add_stores_file_and_record(self, library, logo_file) -> None:
        record = library.add(logo_file)
        assert record["name"] == "brand.png"
        assert (record["width"], record["height"]) == (40, 20)
        assert record["isActive"]
        assert (library.root / record["filename"]).read_bytes() == logo_file.read_bytes()
        assert library.list() == [record]

    def test_new_logo_becomes_the_only_active(self, library, logo_file) -> None:
        first = library.add(logo_file, name="first")
        second = library.add(logo_file, name=" second ")
        assert second["name"] == "second"
        active = {r["id"]: r["isActive"] for r in library.list()}
        assert active == {first["id"]: False, second["id"]: True}
        assert library.activate(first["id"])
        assert [r["isActive"] for r in library.list()] == [True, False]
        assert not library.activate("missing")

    def test_not_an_image(self, library, tmp_path) -> None:
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"nope")
        with pytest.raises(DecodeError):
            library.add(bad)
        assert library.list() == []

    def test_load_decodes_asset(self, library, logo_file) -> None:
        record = library.add(logo_file)
        asset = library.load(record["id"])
        assert asset.name == "brand.png"
        assert asset.image.getpixel((0, 0)) == (0, 0, 255, 255)
        assert library.load("missing") is None

    def test_missing_file(self, library, logo_file) -> None:
        record = library.add(logo_file)
        (library.root / record["filename"]).unlink()
        with pytest.raises(LogoStorageError):
            library.load(record["id"])

    def test_delete_removes_file(self, library, logo_file) -> None:
        record = library.add(logo_file)
        assert library.delete(record["id"])
        assert not (library.root / record["filename"]).exists()
        assert library.list() == []
        assert not library.delete(record["id"])

    def test_index_layout(self, library, logo_file) -> None:
        library.add(logo_file)
        data = json.loads(library.index_path.read_text(encoding="utf-8"))
        assert [r["name"] for r in data["logos"]] == ["brand.png"]

    def test_wrong_shape(self, library) -> None:
        library.root.mkdir()
        library.index_path.write_text("[]", encoding="utf-8")
        with pytest.raises(LogoStorageError):
            library.list()


class TestLogoLibraryManager:
    def test_select_puts_logo_on_canvas(self, library, logo_file) -> None:
        placement = PlacementStore()
        mgr = LogoLibraryManager(library, placement)
        assert mgr.upload(logo_file)
        logo_id = mgr.logos[0]["id"]
        assert placement.logo.asset is None
        assert mgr.select(logo_id)
        assert placement.logo.asset.name == "brand.png"
        assert mgr.selected_id == logo_id

    def test_upload_failure_keeps_list(self, library, tmp_path) -> None:
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"nope")
        mgr = LogoLibraryManager(library, PlacementStore())
        assert not mgr.upload(bad)
        assert "failed to add logo" in mgr.error
        assert mgr.logos == []

    def test_select_unknown(self, library) -> None:
        mgr = LogoLibraryManager(library, PlacementStore())
        assert not mgr.select("nope")
        assert "not found" in mgr.error

    def test_broken_file_leaves_placement(self, library, logo_file) -> None:
        placement = PlacementStore()
        mgr = LogoLibraryManager(library, placement)
        mgr.upload(logo_file)
        record = mgr.logos[0]
        (library.root / record["filename"]).write_bytes(b"garbage")
        before = placement.snapshot()
        assert not mgr.select(record["id"])
        assert mgr.error
        assert placement.snapshot() == before

    def test_deleting_selected_logo_clears_canvas(self, library, logo_file) -> None:
        placement = PlacementStore()
        mgr = LogoLibraryManager(library, placement)
        mgr.upload(logo_file)
        logo_id = mgr.logos[0]["id"]
        mgr.select(logo_id)
        assert mgr.delete(logo_id)
        assert placement.logo.asset is None
        assert mgr.selected_id is None
        assert mgr.logos == []

    def test_clear_selection(self, library, logo_file) -> None:
        placement = PlacementStore()
        mgr = LogoLibraryManager(library, placement)
        mgr.upload(logo_file)
        mgr.select(mgr.logos[0]["id"])
        mgr.clear_selection()
        assert placement.logo.asset is None
        assert not any(r["isActive"] for r in mgr.logos)

    def test_fetch_reports_storage_error(self, library) -> None:
        library.root.mkdir()
        library.index_path.write_text("{broken", encoding="utf-8")
        mgr = LogoLibraryManager(library, PlacementStore())
        assert not mgr.fetch()
        assert "failed to load logos" in mgr.error
