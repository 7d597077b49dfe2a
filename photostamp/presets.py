# photostamp/presets.py
"""
Presets: named snapshots of logo/date placement (never annotations).

encode()/decode() map the placement store to the flat settings record the
preset storage keeps. JsonPresetStore persists records in the app
directory; PresetManager ties the two together for the editor.
"""
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from photostamp.config import PRESETS_FILE
from photostamp.models import new_id

logger = logging.getLogger(__name__)

LOGO_ANCHOR = "top-left"

RECORD_FIELDS = (
    "logoPositionX", "logoPositionY", "logoAnchor", "logoScale", "logoOpacity",
    "datePositionX", "datePositionY", "dateFormat",
    "fontFamily", "fontSize", "fontColor", "dateScale", "dateOpacity",
)


class PresetStorageError(RuntimeError):
    """Reading or writing preset storage failed."""


def encode(store):
    """Placement store -> flat preset record (normalized values only)."""
    logo, date = store.logo, store.date
    return {
        "logoPositionX": logo.position.x,
        "logoPositionY": logo.position.y,
        "logoAnchor": LOGO_ANCHOR,
        "logoScale": logo.scale,
        "logoOpacity": logo.opacity,
        "datePositionX": date.position.x,
        "datePositionY": date.position.y,
        "dateFormat": date.text,
        "fontFamily": date.font.family,
        "fontSize": date.font.size,
        "fontColor": date.font.color,
        "dateScale": date.scale,
        "dateOpacity": date.opacity,
    }


def decode(record, store):
    """
    Apply a preset record through the store setters.

    Only keys present (and not None) are applied; everything else keeps
    its current value. Clamping rules of the setters still hold.
    """
    def has(key):
        return record.get(key) is not None

    if has("logoPositionX") or has("logoPositionY"):
        cur = store.logo.position
        store.set_logo_position((
            float(record["logoPositionX"]) if has("logoPositionX") else cur.x,
            float(record["logoPositionY"]) if has("logoPositionY") else cur.y,
        ))
    if has("logoScale"):
        store.set_logo_scale(record["logoScale"])
    if has("logoOpacity"):
        store.set_logo_opacity(record["logoOpacity"])

    if has("datePositionX") or has("datePositionY"):
        cur = store.date.position
        store.set_date_position((
            float(record["datePositionX"]) if has("datePositionX") else cur.x,
            float(record["datePositionY"]) if has("datePositionY") else cur.y,
        ))
    if has("dateFormat"):
        store.set_date_text(str(record["dateFormat"]))
    if has("fontFamily") or has("fontSize") or has("fontColor"):
        store.set_font(
            family=record.get("fontFamily"),
            size=int(record["fontSize"]) if has("fontSize") else None,
            color=record.get("fontColor"),
        )
    if has("dateScale"):
        store.set_date_scale(record["dateScale"])
    if has("dateOpacity"):
        store.set_date_opacity(record["dateOpacity"])


def _now():
    return datetime.now(timezone.utc).isoformat()


class JsonPresetStore:
    """Preset records in a JSON file, listed in insertion order."""

    def __init__(self, path=PRESETS_FILE):
        self.path = Path(path)

    def _load(self):
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PresetStorageError(f"cannot read {self.path}: {e}") from e
        records = data.get("presets", []) if isinstance(data, dict) else None
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise PresetStorageError(f"{self.path} does not hold a preset list")
        return records

    def _save(self, records):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"presets": records}, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise PresetStorageError(f"cannot write {self.path}: {e}") from e

    def create(self, record):
        records = self._load()
        now = _now()
        stored = dict(record, id=new_id(), createdAt=now, updatedAt=now)
        stored.setdefault("name", "custom")
        records.append(stored)
        self._save(records)
        return stored["id"]

    def list(self):
        return self._load()

    def get(self, preset_id):
        for r in self._load():
            if r.get("id") == preset_id:
                return r
        return None

    def update(self, preset_id, patch):
        records = self._load()
        for r in records:
            if r.get("id") == preset_id:
                r.update({k: v for k, v in patch.items() if v is not None and k != "id"})
                r["updatedAt"] = _now()
                self._save(records)
                return r
        return None

    def delete(self, preset_id):
        records = self._load()
        kept = [r for r in records if r.get("id") != preset_id]
        if len(kept) == len(records):
            return False
        self._save(kept)
        return True


class PresetManager:
    """
    Preset list for the editor.

    Every operation returns True/False; on failure self.error holds a
    message and the placement store is left as it was before the call.
    """

    def __init__(self, store, placement):
        self.store = store
        self.placement = placement
        self.presets = []
        self.selected_id = None
        self.error = None

    def fetch(self):
        self.error = None
        try:
            self.presets = list(self.store.list())
        except PresetStorageError as e:
            return self._fail("failed to load presets", e)
        return True

    def save_current(self, name):
        self.error = None
        record = dict(encode(self.placement), name=name)
        try:
            preset_id = self.store.create(record)
        except PresetStorageError as e:
            return self._fail("failed to save preset", e)
        self.presets.append(dict(record, id=preset_id))
        self.selected_id = preset_id
        logger.info("saved preset %r (%s)", name, preset_id)
        return True

    def apply(self, preset_id):
        self.error = None
        preset = next((p for p in self.presets if p.get("id") == preset_id), None)
        if preset is None:
            try:
                preset = self.store.get(preset_id)
            except PresetStorageError as e:
                return self._fail("failed to load preset", e)
            if preset is None:
                self.error = f"preset {preset_id} not found"
                return False

        before = self.placement.snapshot()
        try:
            decode(preset, self.placement)
        except (TypeError, ValueError) as e:
            self.placement.restore(before)
            return self._fail("preset is invalid", e)
        self.selected_id = preset_id
        return True

    def delete(self, preset_id):
        self.error = None
        try:
            deleted = self.store.delete(preset_id)
        except PresetStorageError as e:
            return self._fail("failed to delete preset", e)
        if not deleted:
            self.error = f"preset {preset_id} not found"
            return False
        self.presets = [p for p in self.presets if p.get("id") != preset_id]
        if self.selected_id == preset_id:
            self.selected_id = None
        return True

    def _fail(self, message, exc):
        self.error = f"{message}: {exc}"
        logger.warning(self.error)
        return False
