"""
File-backed persistence for the canvas: a single auto-save slot holding
the last document state, and a list of named versions.

Both stores write JSON. I/O, encoding and decoding failures are logged
and reported through the return value; they are never raised to the
caller.
"""
import json
import time
import uuid
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from .config import AUTOSAVE_FILE, VERSIONS_FILE
from .core.doc import CanvasDoc
from .core.node import ComponentNode


logger = logging.getLogger(__name__)

AUTOSAVE_MAX_AGE = 24 * 60 * 60  # seconds


def _write_json(path: Path, data: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp, "w") as f:
            json.dump(data, f)
    except (OSError, ValueError, TypeError):
        tmp.unlink(missing_ok=True)
        raise
    tmp.replace(path)


class AutoSave:
    def __init__(
        self, path: Path = AUTOSAVE_FILE, max_age: float = AUTOSAVE_MAX_AGE
    ):
        self.path = Path(path)
        self.max_age = max_age

    def save(self, doc: CanvasDoc) -> bool:
        try:
            data = doc.to_dict()
            data["timestamp"] = time.time()
            _write_json(self.path, data)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Auto-save to {self.path} failed: {e}")
            return False
        logger.debug(f"Auto-saved {len(doc.components)} component(s)")
        return True

    def load(self) -> Optional[CanvasDoc]:
        """
        Returns the auto-saved document, or None if there is none, it
        cannot be read, or it is older than `max_age` seconds.
        """
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            timestamp = float(data.get("timestamp") or 0)
            if time.time() - timestamp >= self.max_age:
                logger.info(f"Ignoring stale auto-save in {self.path}")
                return None
            return CanvasDoc.from_dict(data)
        except (OSError, ValueError, AttributeError, TypeError) as e:
            logger.error(f"Failed to load auto-save data: {e}")
            return None

    def clear(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to clear auto-save data: {e}")
            return False
        return True


class VersionStore:
    """Named snapshots of the component list, newest first."""

    def __init__(self, path: Path = VERSIONS_FILE):
        self.path = Path(path)
        self.versions: List[Dict[str, Any]] = []
        self._load()

    def _load(self):
        if not self.path.exists():
            return
        try:
            with open(self.path, "r") as f:
                versions = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load versions: {e}")
            return
        if isinstance(versions, list):
            self.versions = versions
        else:
            logger.warning(f"Ignoring malformed versions file {self.path}")

    def _save(self) -> bool:
        try:
            _write_json(self.path, self.versions)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to save versions: {e}")
            return False
        return True

    def save_version(
        self, name: str, components: Sequence[ComponentNode]
    ) -> Dict[str, Any]:
        version = {
            "id": uuid.uuid4().hex,
            "timestamp": time.time(),
            "name": name,
            "components": [node.to_dict() for node in components],
        }
        self.versions.insert(0, version)
        self._save()
        logger.info(f"Saved version '{name}'")
        return version

    def get_versions(self) -> List[Dict[str, Any]]:
        return list(self.versions)

    def restore_version(
        self, version_id: str
    ) -> Optional[List[ComponentNode]]:
        for version in self.versions:
            if version.get("id") == version_id:
                return [
                    ComponentNode.from_dict(c)
                    for c in version.get("components", ())
                ]
        logger.debug(f"No version '{version_id}'")
        return None

    def clear_versions(self) -> bool:
        self.versions = []
        return self._save()
