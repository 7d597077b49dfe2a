"""Batch export through BatchExporter, the sinks and the encoders."""

import asyncio
import io
import zipfile

import pytest
from PIL import Image

from photostamp.batch_worker import (
    BatchExporter, DirectorySink, MemorySink, batch_export, ensure_output_path, output_names,
)
from photostamp.exporter import RenderError, composite, encode
from photostamp.models import (
    AnnotationStyle, BoxAnnotation, ExportSettings, LogoAsset, LogoPlacement, PlacementSnapshot,
    Position, Size,
)
from photostamp.session import EditorSession


def open_png(data):
    return Image.open(io.BytesIO(data)).convert("RGBA")


@pytest.fixture
def session(entry_factory, logo_asset):
    s = EditorSession()
    s.add_image(entry_factory("one", 400, 300, name="one.jpg"))
    s.add_image(entry_factory("two", 200, 150, color=(200, 30, 30), name="two.jpg"))
    s.add_image(entry_factory("three", 400, 300, name="three.jpg"))
    s.placement.set_logo_asset(logo_asset)
    s.placement.set_date_text("22.03")
    return s


class TestSnapshotConsistency:
    def test_edits_during_batch_do_not_leak(self, session) -> None:
        for image_id in ("one", "three"):
            session.annotations.add_annotation(
                image_id, BoxAnnotation(id=f"box-{image_id}", position=Position(10, 10),
                                        size=Size(50, 40)))

        def progress(idx, total, success, message):
            if idx == 1:
                session.placement.set_logo_position((0.5, 0.5))
                session.placement.set_logo_scale(0.9)
                session.placement.set_date_text("99.99")
                session.annotations.add_annotation(
                    "three", BoxAnnotation(id="late", position=Position(0, 0), size=Size(5, 5)))

        sink = MemorySink()
        summary = batch_export(session, ExportSettings(), sink, progress)
        assert summary.ok
        assert [f.filename for f in sink.files] == ["one.png", "two.png", "three.png"]
        assert sink.files[0].data == sink.files[2].data

    def test_progress_is_reported_per_image(self, session) -> None:
        calls = []
        batch_export(session, ExportSettings(), MemorySink(),
                     lambda *args: calls.append(args))
        assert [(c[0], c[1], c[2]) for c in calls] == [(1, 3, True), (2, 3, True), (3, 3, True)]


class TestDegradation:
    def test_corrupt_logo_matches_no_logo(self, session) -> None:
        session.images[:] = session.images[:1]
        plain = MemorySink()
        session.placement.remove_logo()
        batch_export(session, ExportSettings(), plain)

        broken = LogoAsset(name="bad.png", data=b"not a png", width=10, height=10,
                           image=Image.new("RGBA", (10, 10)))
        session.placement.set_logo_asset(broken)
        damaged = MemorySink()
        summary = batch_export(session, ExportSettings(), damaged)
        assert summary.ok
        assert damaged.files[0].data == plain.files[0].data

    def test_undecodable_image_is_skipped(self, session, entry_factory) -> None:
        bad = entry_factory("bad", 10, 10, name="bad.jpg")
        bad.source = b"junk"
        session.add_image(bad)
        calls = []
        sink = MemorySink()
        summary = batch_export(session, ExportSettings(), sink,
                               lambda idx, total, ok, msg: calls.append((idx, ok)))
        assert summary.skipped and summary.skipped[0][0] == "bad.jpg"
        assert not summary.ok
        assert calls[-1] == (4, False)
        assert len(sink.files) == 3

    def test_unknown_annotation_color_skips_image(self, session) -> None:
        session.annotations.add_annotation(
            "two", BoxAnnotation(id="odd", position=Position(5, 5), size=Size(20, 20),
                                 style=AnnotationStyle(color="bogus")))
        calls = []
        sink = MemorySink()
        summary = batch_export(session, ExportSettings(), sink,
                               lambda idx, total, ok, msg: calls.append((idx, ok)))
        assert [name for name, _ in summary.skipped] == ["two.jpg"]
        assert [f.filename for f in sink.files] == ["one.png", "three.png"]
        assert calls == [(1, True), (2, False), (3, True)]

    def test_composite_reports_render_error(self) -> None:
        note = BoxAnnotation(id="odd", position=Position(0, 0), size=Size(5, 5),
                             style=AnnotationStyle(color="bogus"))
        with pytest.raises(RenderError):
            composite(Image.new("RGB", (20, 20)), PlacementSnapshot(), [note])

    def test_session_release_mid_batch_keeps_logo(self, session) -> None:
        """The exporter decodes its own logo copy."""
        session.images[:] = session.images[:1]
        exporter = BatchExporter.from_session(session, ExportSettings(), MemorySink())
        session.placement.remove_logo()
        summary = asyncio.run(exporter.run())
        assert summary.ok
        out = open_png(exporter.sink.files[0].data)
        # solid red logo, 120x60 at (8, 6); the date text sits in its top-left corner
        assert out.getpixel((100, 50))[:3] == (255, 0, 0)


class TestNamesAndSinks:
    def test_duplicate_names(self, entry_factory) -> None:
        entries = [entry_factory(str(i), 10, 10, name="IMG.jpg") for i in range(3)]
        names = output_names(entries, ExportSettings(suffix="_wm"))
        assert names == ["IMG_wm.png", "IMG_wm_1.png", "IMG_wm_2.png"]

    def test_explicit_filename(self, entry_factory) -> None:
        entries = [entry_factory("a", 10, 10), entry_factory("b", 10, 10)]
        names = output_names(entries, ExportSettings(filename="trip", format="jpg"))
        assert names == ["trip.jpg", "trip_1.jpg"]

    def test_single_output_is_a_file(self, session, tmp_path) -> None:
        session.images[:] = session.images[:1]
        summary = batch_export(session, ExportSettings(suffix="_wm"), DirectorySink(tmp_path))
        assert summary.paths == [str(tmp_path / "one_wm.png")]
        assert open_png((tmp_path / "one_wm.png").read_bytes()).size == (400, 300)

    def test_many_outputs_are_zipped(self, session, tmp_path) -> None:
        summary = batch_export(session, ExportSettings(), DirectorySink(tmp_path))
        (path,) = summary.paths
        assert path.endswith("watermark_images.zip")
        with zipfile.ZipFile(path) as zf:
            assert zf.namelist() == ["one.png", "two.png", "three.png"]

    def test_existing_file_not_overwritten(self, tmp_path) -> None:
        (tmp_path / "x.png").write_bytes(b"old")
        assert ensure_output_path(tmp_path / "x.png") == str(tmp_path / "x_1.png")


class TestCancel:
    def test_cancel_stops_before_next_image(self, session) -> None:
        sink = MemorySink()
        exporter = BatchExporter.from_session(session, ExportSettings(), sink)
        exporter.progress_callback = lambda idx, total, ok, msg: exporter.cancel()
        summary = asyncio.run(exporter.run())
        assert summary.cancelled
        assert summary.written == ["one.png"]
        assert [f.filename for f in sink.files] == ["one.png"]


class TestEncoding:
    def test_letterbox_fills_white(self, session) -> None:
        session.images[:] = session.images[:1]
        sink = MemorySink()
        batch_export(session, ExportSettings(size="640x400"), sink)
        out = open_png(sink.files[0].data)
        assert out.size == (640, 400)
        # 400x300 fits as 533x400, centered at x=53
        assert out.getpixel((5, 200)) == (255, 255, 255, 255)
        assert out.getpixel((320, 390))[:3] == (40, 90, 160)

    def test_jpeg_output(self, session) -> None:
        session.images[:] = session.images[:1]
        sink = MemorySink()
        batch_export(session, ExportSettings(format="jpeg", quality=80), sink)
        (f,) = sink.files
        assert f.filename == "one.jpg"
        assert f.mime_type == "image/jpeg"
        assert f.data[:2] == b"\xff\xd8"

    def test_composite_keeps_source_size(self) -> None:
        img = Image.new("RGB", (120, 80), (1, 2, 3))
        out = composite(img, PlacementSnapshot())
        assert out.size == (120, 80)
        assert out.getpixel((60, 40)) == (1, 2, 3, 255)

    def test_encode_png(self) -> None:
        data = encode(Image.new("RGBA", (4, 4)), "png")
        assert data.startswith(b"\x89PNG")

    def test_logo_opacity_is_applied_once(self) -> None:
        black = Image.new("RGBA", (10, 10), (0, 0, 0, 255))
        asset = LogoAsset(name="black.png", data=b"", width=10, height=10, image=black)
        scene = PlacementSnapshot(logo=LogoPlacement(
            position=Position(0, 0), scale=1.0, opacity=0.5, asset=asset))
        out = composite(Image.new("RGB", (10, 10), (255, 255, 255)), scene)
        # half-transparent black over white
        assert 120 <= out.getpixel((5, 5))[0] <= 135
