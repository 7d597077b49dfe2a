# photostamp/session.py
import json
import logging
from dataclasses import replace
from pathlib import Path

from photostamp.annotations import AnnotationEngine
from photostamp.geometry import SurfaceTransform, fit_scale, template_ratio
from photostamp.image_io import DecodeError, collect_image_paths, load_image_entry
from photostamp.models import annotation_from_dict, annotation_to_dict, new_id
from photostamp.pipeline import RenderTarget, compose_frame
from photostamp.placement import PlacementStore

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Everything one editor works on: the ordered images, the placement
    store, the annotation engine and (optionally) the preset and logo
    library managers.

    The first image is the template image; its width is the reference for
    annotation geometry on every other image.
    """

    def __init__(self, placement=None, annotations=None, presets=None, logos=None):
        self.images = []
        self.placement = placement or PlacementStore()
        self.annotations = annotations or AnnotationEngine()
        self.presets = presets
        self.logos = logos
        self.current_id = None

    @property
    def template_image(self):
        return self.images[0] if self.images else None

    @property
    def template_width(self):
        t = self.template_image
        return t.width if t else None

    @property
    def current_image(self):
        return self.get_image(self.current_id)

    def get_image(self, image_id):
        for entry in self.images:
            if entry.id == image_id:
                return entry
        return None

    def add_image(self, entry):
        self.images.append(entry)
        if self.current_id is None:
            self.current_id = entry.id
        return entry

    def add_paths(self, paths):
        """Decode image files (folders are searched) and append them; returns the new entries."""
        known = {e.source for e in self.images}
        added = []
        for path in collect_image_paths(paths):
            if path in known:
                continue
            try:
                entry = load_image_entry(path)
            except DecodeError as e:
                logger.warning("skipping %s: %s", path, e)
                continue
            added.append(self.add_image(entry))
        return added

    def remove_image(self, image_id):
        entry = self.get_image(image_id)
        if entry is None:
            return False
        self.images.remove(entry)
        entry.release()
        self.annotations.remove_image(image_id)
        if self.current_id == image_id:
            self.current_id = self.images[0].id if self.images else None
        return True

    def select_image(self, image_id):
        if self.get_image(image_id) is None:
            raise KeyError(image_id)
        self.annotations.cancel()
        self.annotations.clear_selection()
        self.current_id = image_id

    # --- annotation files ---
    def annotation_records(self):
        """Annotations of every image as plain dicts, keyed by image name."""
        records = {}
        for entry in self.images:
            items = self.annotations.get_annotations(entry.id)
            if items:
                records[entry.name] = [annotation_to_dict(a) for a in items]
        return records

    def apply_annotation_records(self, records):
        """
        Append annotations from annotation_records() output to the images
        with matching names. Unknown images and bad entries are skipped;
        returns the number of annotations added.
        """
        by_name = {e.name: e for e in self.images}
        added = 0
        for name, items in records.items():
            entry = by_name.get(name)
            if entry is None:
                logger.warning("no image named %r, skipping its annotations", name)
                continue
            for item in items:
                try:
                    annotation = annotation_from_dict(item)
                except (AttributeError, TypeError, ValueError) as e:
                    logger.warning("skipping malformed annotation on %s: %s", name, e)
                    continue
                if annotation is None:
                    logger.warning("skipping annotation of unknown type %r on %s",
                                   item.get("type"), name)
                    continue
                if any(a.id == annotation.id for a in self.annotations.get_annotations(entry.id)):
                    annotation = replace(annotation, id=new_id())
                self.annotations.add_annotation(entry.id, annotation)
                added += 1
        return added

    def save_annotations(self, path):
        data = {"images": self.annotation_records()}
        Path(path).write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    def load_annotations(self, path):
        """Read a file written by save_annotations(); ValueError if it is not one."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        records = data.get("images") if isinstance(data, dict) else None
        if not isinstance(records, dict):
            raise ValueError(f"{path} is not an annotation file")
        return self.apply_annotation_records(records)

    # --- preview helpers ---
    def view_scale(self, container_width, container_height, entry=None):
        """Fit-to-container zoom for the current image (small images are enlarged)."""
        entry = entry or self.current_image
        if entry is None:
            return 1.0
        return fit_scale(entry.width, entry.height, container_width, container_height)

    def surface_transform(self, view_scale, entry=None):
        entry = entry or self.current_image
        ratio = template_ratio(entry.width, self.template_width) if entry else 1.0
        return SurfaceTransform(view_scale=view_scale, ratio=ratio)

    def preview_frame(self, view_scale, entry=None):
        entry = entry or self.current_image
        if entry is None:
            return None
        return compose_frame(
            RenderTarget.from_entry(entry),
            self.placement.snapshot(),
            self.annotations.get_annotations(entry.id),
            template_width=self.template_width,
            render_scale=view_scale,
            selected_id=self.annotations.selected_id,
            draft=self.annotations.draft,
        )
