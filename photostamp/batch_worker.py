# photostamp/batch_worker.py
import asyncio
import io
import logging
import pathlib
import zipfile
from dataclasses import dataclass, field, replace
from typing import List, Tuple

from photostamp.config import ARCHIVE_NAME
from photostamp.exporter import EncodeError, RenderError, export_image
from photostamp.image_io import DecodeError, decode_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportedFile:
    filename: str
    data: bytes
    mime_type: str


@dataclass
class ExportSummary:
    written: List[str] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)   # (image name, reason)
    paths: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self):
        return not self.skipped and not self.cancelled


def ensure_output_path(dst):
    """Append _1, _2, ... to the stem while the path already exists."""
    dst = pathlib.Path(dst)
    stem, ext = dst.stem, dst.suffix
    i = 1
    while dst.exists():
        dst = dst.with_name(f"{stem}_{i}{ext}")
        i += 1
    return str(dst)


def output_names(entries, settings):
    """
    One output filename per image, in sequence order.

    The stem is the explicit settings.filename or the image's original stem,
    followed by settings.suffix. Repeated names get _1, _2, ... appended.
    """
    used = set()
    names = []
    for entry in entries:
        stem = settings.filename or pathlib.Path(entry.name).stem
        base = f"{stem}{settings.suffix}"
        name = f"{base}{settings.extension}"
        i = 1
        while name in used:
            name = f"{base}_{i}{settings.extension}"
            i += 1
        used.add(name)
        names.append(name)
    return names


class MemorySink:
    """Keeps delivered files in memory."""

    def __init__(self):
        self.files = []

    def deliver(self, files):
        self.files.extend(files)
        return [f.filename for f in files]


class DirectorySink:
    """
    Writes one output as a plain file and several as a ZIP archive.
    Existing files are never overwritten.
    """

    def __init__(self, out_dir, archive_name=ARCHIVE_NAME):
        self.out_dir = pathlib.Path(out_dir)
        self.archive_name = archive_name

    def deliver(self, files):
        if not files:
            return []
        self.out_dir.mkdir(parents=True, exist_ok=True)
        if len(files) == 1:
            dst = ensure_output_path(self.out_dir / files[0].filename)
            pathlib.Path(dst).write_bytes(files[0].data)
            return [dst]
        dst = ensure_output_path(self.out_dir / self.archive_name)
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
            for f in files:
                zf.writestr(f.filename, f.data)
        pathlib.Path(dst).write_bytes(buf.getvalue())
        return [dst]


class BatchExporter:
    """
    Sequential export of a batch of images.

    Placement and annotations are snapshotted when the exporter is created,
    so edits made while the batch runs never reach images still pending.
    progress_callback(idx, total, success, message) is called after every
    image; cancel() stops the batch before the next image starts.
    """

    def __init__(self, entries, scene, annotations, settings, sink, progress_callback=None):
        self.entries = list(entries)
        self.scene = scene
        self.annotations = {k: tuple(v) for k, v in annotations.items()}
        self.settings = settings
        self.sink = sink
        self.progress_callback = progress_callback
        self.template_width = self.entries[0].width if self.entries else None
        self._cancelled = False

    @classmethod
    def from_session(cls, session, settings, sink, progress_callback=None):
        images = list(session.images)
        annotations = {e.id: session.annotations.get_annotations(e.id) for e in images}
        return cls(images, session.placement.snapshot(), annotations, settings, sink,
                   progress_callback)

    def cancel(self):
        self._cancelled = True

    async def _decode_logo(self):
        asset = self.scene.logo.asset
        if asset is None:
            return self.scene
        try:
            img = await decode_image(asset.data)
            img = img.convert("RGBA")
        except DecodeError as e:
            logger.warning("logo %s could not be decoded, exporting without it: %s", asset.name, e)
            img = None
        # a private copy: the session may release its own asset mid-batch
        logo = replace(self.scene.logo, asset=replace(asset, image=img))
        return replace(self.scene, logo=logo)

    async def _decode(self, entry):
        if entry.source is not None:
            return await decode_image(entry.source)
        if entry.image is not None:
            return entry.image
        raise DecodeError(f"{entry.name} has no pixel source")

    async def run(self):
        summary = ExportSummary()
        total = len(self.entries)
        if not total:
            return summary

        scene = await self._decode_logo()
        names = output_names(self.entries, self.settings)
        outputs = []

        for idx, (entry, name) in enumerate(zip(self.entries, names), start=1):
            if self._cancelled:
                summary.cancelled = True
                logger.info("export cancelled after %d/%d images", idx - 1, total)
                break
            try:
                img = await self._decode(entry)
                data = await asyncio.to_thread(
                    export_image, img, scene, self.annotations.get(entry.id, ()),
                    self.template_width, self.settings,
                )
            except (DecodeError, EncodeError, RenderError) as e:
                summary.skipped.append((entry.name, str(e)))
                logger.warning("skipped %s: %s", entry.name, e)
                self._report(idx, total, False, f"error ({entry.name}): {e}")
                continue
            outputs.append(ExportedFile(name, data, self.settings.mime_type))
            summary.written.append(name)
            logger.info("[%d/%d] rendered %s", idx, total, name)
            self._report(idx, total, True, f"saved: {name}")

        summary.paths = self.sink.deliver(outputs)
        return summary

    def _report(self, idx, total, success, message):
        if self.progress_callback:
            self.progress_callback(idx, total, success, message)


def batch_export(session, settings, sink, progress_callback=None):
    """Blocking helper: snapshot the session, run the batch, return the summary."""
    exporter = BatchExporter.from_session(session, settings, sink, progress_callback)
    return asyncio.run(exporter.run())
