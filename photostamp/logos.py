# photostamp/logos.py
"""
Logo library: uploaded logo files kept in the app directory so they can be
reused across sessions.

LogoLibrary stores the files plus an index of
{id, name, filename, width, height, isActive} records. LogoLibraryManager
selects a stored logo into the placement store for the editor.
"""
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from photostamp.config import LOGOS_DIR
from photostamp.image_io import DecodeError, load_logo_asset
from photostamp.models import new_id

logger = logging.getLogger(__name__)

INDEX_NAME = "logos.json"


class LogoStorageError(RuntimeError):
    """The logo library could not be read or written."""


class LogoLibrary:
    """Logo files in a directory, listed in upload order."""

    def __init__(self, root=LOGOS_DIR):
        self.root = Path(root)
        self.index_path = self.root / INDEX_NAME

    def _load(self):
        if not self.index_path.exists():
            return []
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise LogoStorageError(f"cannot read {self.index_path}: {e}") from e
        records = data.get("logos", []) if isinstance(data, dict) else None
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise LogoStorageError(f"{self.index_path} does not hold a logo list")
        return records

    def _save(self, records):
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.root), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"logos": records}, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.index_path)
        except OSError as e:
            raise LogoStorageError(f"cannot write {self.index_path}: {e}") from e

    def list(self):
        return self._load()

    def get(self, logo_id):
        for r in self._load():
            if r.get("id") == logo_id:
                return r
        return None

    def add(self, source, name=None):
        """
        Store a logo from a path or bytes and make it the active one.

        Raises DecodeError if the data is not an image; nothing is written then.
        """
        asset = load_logo_asset(source, name)
        records = self._load()
        logo_id = new_id()
        suffix = Path(asset.name).suffix.lower() or ".png"
        filename = f"{logo_id}{suffix}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / filename).write_bytes(asset.data)
        except OSError as e:
            raise LogoStorageError(f"cannot store {asset.name}: {e}") from e

        for r in records:
            r["isActive"] = False
        record = {
            "id": logo_id,
            "name": (name or "").strip() or asset.name,
            "filename": filename,
            "width": asset.width,
            "height": asset.height,
            "isActive": True,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        }
        records.append(record)
        self._save(records)
        logger.info("stored logo %r as %s", record["name"], filename)
        return record

    def load(self, logo_id):
        """Decoded LogoAsset for a stored logo; None if the id is unknown."""
        record = self.get(logo_id)
        if record is None:
            return None
        try:
            data = (self.root / record["filename"]).read_bytes()
        except OSError as e:
            raise LogoStorageError(f"logo file of {record['name']!r} is missing: {e}") from e
        return load_logo_asset(data, record["name"])

    def activate(self, logo_id):
        records = self._load()
        if not any(r.get("id") == logo_id for r in records):
            return False
        for r in records:
            r["isActive"] = r.get("id") == logo_id
        self._save(records)
        return True

    def delete(self, logo_id):
        records = self._load()
        record = next((r for r in records if r.get("id") == logo_id), None)
        if record is None:
            return False
        self._save([r for r in records if r is not record])
        try:
            (self.root / record["filename"]).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            # index already updated; the file is left behind
            logger.warning("could not remove %s: %s", record["filename"], e)
        return True


class LogoLibraryManager:
    """
    Logo list for the editor.

    Like PresetManager, operations return True/False and leave a message in
    self.error on failure; the placement store only changes on success.
    """

    def __init__(self, library, placement):
        self.library = library
        self.placement = placement
        self.logos = []
        self.selected_id = None
        self.error = None

    def fetch(self):
        self.error = None
        try:
            self.logos = list(self.library.list())
        except LogoStorageError as e:
            return self._fail("failed to load logos", e)
        return True

    def upload(self, source, name=None):
        self.error = None
        try:
            record = self.library.add(source, name)
        except (DecodeError, LogoStorageError) as e:
            return self._fail("failed to add logo", e)
        self.logos = [dict(r, isActive=False) for r in self.logos] + [record]
        return True

    def select(self, logo_id):
        """Put a stored logo on the canvas."""
        self.error = None
        try:
            asset = self.library.load(logo_id)
            if asset is None:
                self.error = f"logo {logo_id} not found"
                return False
            self.library.activate(logo_id)
        except (DecodeError, LogoStorageError) as e:
            return self._fail("failed to load logo", e)
        self.placement.set_logo_asset(asset)
        self.selected_id = logo_id
        self.logos = [dict(r, isActive=r.get("id") == logo_id) for r in self.logos]
        return True

    def clear_selection(self):
        self.placement.remove_logo()
        self.selected_id = None
        self.logos = [dict(r, isActive=False) for r in self.logos]

    def delete(self, logo_id):
        self.error = None
        try:
            deleted = self.library.delete(logo_id)
        except LogoStorageError as e:
            return self._fail("failed to delete logo", e)
        if not deleted:
            self.error = f"logo {logo_id} not found"
            return False
        self.logos = [r for r in self.logos if r.get("id") != logo_id]
        if self.selected_id == logo_id:
            # the deleted logo was on the canvas
            self.placement.remove_logo()
            self.selected_id = None
        return True

    def _fail(self, message, exc):
        self.error = f"{message}: {exc}"
        logger.warning(self.error)
        return False
