"""
Database Helper

The whole datastore is a single JSON document on disk:

    {
      "shops": {"<slug>": {...shop...}},
      "stats": {"totalShops": 0, "totalViews": 0, "lastUpdate": "..."}
    }

Every call to load() re-reads the file; save() rewrites it entirely.
Writers should go through transaction() so load-modify-save cycles
from concurrent requests never interleave.
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Protocol, Union

log = logging.getLogger(__name__)


class StoreError(IOError):
    """Underlying read or write of the store failed."""


def now_iso() -> str:
    """UTC timestamp, millisecond precision, e.g. 2024-05-01T10:00:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def empty_document() -> Dict[str, Any]:
    return {
        "shops": {},
        "stats": {
            "totalShops": 0,
            "totalViews": 0,
            "lastUpdate": now_iso(),
        },
    }


class DocumentStore(Protocol):
    def load(self) -> Dict[str, Any]: ...

    def save(self, doc: Dict[str, Any]) -> None: ...

    def transaction(self) -> Any: ...


class JsonStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    def exists(self) -> bool:
        return self.path.exists()

    def init(self) -> bool:
        """Create the data directory and an empty document if none exists.

        Returns True when a new document was written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create data directory {self.path.parent}: {e}") from e
        with self._lock:
            if self.path.exists():
                return False
            self.save(empty_document())
            log.info("Initialized empty store at %s", self.path)
            return True

    def load(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(doc, dict):
            raise StoreError(f"Store {self.path} does not hold a JSON object")
        doc.setdefault("shops", {})
        doc.setdefault("stats", {"totalShops": 0, "totalViews": 0, "lastUpdate": None})
        return doc

    def save(self, doc: Dict[str, Any]) -> None:
        payload = json.dumps(doc, indent=2, ensure_ascii=False)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreError(f"Cannot write store {self.path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[Dict[str, Any]]:
        """Hold the store lock across load -> mutate -> save.

        The document is saved only if the block exits without raising.
        """
        with self._lock:
            doc = self.load()
            yield doc
            self.save(doc)
