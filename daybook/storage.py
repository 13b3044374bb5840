"""Key-value blob stores the RecordStore persists into."""

import logging
import os
import re
import time
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class Persistence(Protocol):
    def load(self, key: str) -> Optional[bytes]:
        ...

    def save(self, key: str, data: bytes) -> bool:
        ...


class MemoryPersistence:
    """Dict-backed store, mostly for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._blobs: Dict[str, bytes] = dict(initial or {})

    def load(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def save(self, key: str, data: bytes) -> bool:
        self._blobs[key] = bytes(data)
        return True


class FilePersistence:
    """One `<key>.json` file per key inside `directory`.

    Saves are atomic-ish:
    - write to temp file in same directory
    - flush + fsync
    - os.replace to target
    - chmod 0600 best-effort
    """

    def __init__(self, directory):
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        data = path.read_bytes()
        if not data.strip():
            return None
        return data

    def save(self, key: str, data: bytes) -> bool:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")

        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp, path)

        try:
            os.chmod(path, 0o600)
        except OSError:
            pass
        return True

    def backup(self, key: str, data: bytes) -> Path:
        """Keep an unreadable payload aside before it gets overwritten."""
        path = self.path_for(key)
        backup = path.with_suffix(f".corrupt-{int(time.time())}.json")
        backup.write_bytes(data)
        logger.warning("Backed up unreadable %s to %s", path, backup)
        return backup
