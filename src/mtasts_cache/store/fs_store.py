"""Filesystem policy store: one JSON file per domain.

File layout (one object per file, named after the domain):
    {"ID": "20240101", "FetchTime": "2024-01-01T00:00:00+00:00",
     "Policy": {"Mode": "enforce", "MaxAge": 86400, "MX": ["*.example.com"]}}

Writes go to a temporary file in the same directory, then os.replace()
moves it over the old record. Rename is atomic on POSIX and Windows,
so a concurrent load() sees either the old record or the new one.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from mtasts_cache.domain.errors import NoPolicyError, StorageError
from mtasts_cache.domain.policy import CacheRecord, Policy
from mtasts_cache.domain.types import DomainName, PolicyId
from mtasts_cache.store.base import PolicyStore

log = logging.getLogger(__name__)

_TMP_SUFFIX = ".tmp"


class FSPolicyStore(PolicyStore):
    """Store records as files under directory.

    The directory must exist and be writable.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def list(self) -> list[DomainName]:
        try:
            entries = list(os.scandir(self._dir))
        except OSError as err:
            raise StorageError(f"cannot list {self._dir}: {err}") from err
        return sorted(
            e.name for e in entries
            # Temporary files start with "."; keys never do, see _path().
            if e.is_file() and not e.name.startswith(".")
        )

    def store(
        self, key: DomainName, id: PolicyId, fetch_time: datetime, policy: Policy
    ) -> None:
        path = self._path(key)
        payload = {
            "ID": id,
            "FetchTime": fetch_time.isoformat(),
            "Policy": policy.to_json(),
        }
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._dir, prefix=f".{key}.", suffix=_TMP_SUFFIX
            )
        except OSError as err:
            raise StorageError(f"cannot create temporary file for {key}: {err}") from err
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp_name, path)
        except OSError as err:
            try:
                os.unlink(tmp_name)
            except OSError:
                log.debug("Could not remove %s", tmp_name)
            raise StorageError(f"cannot write {path}: {err}") from err

    def load(self, key: DomainName) -> CacheRecord:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise NoPolicyError(f"no cached policy for {key}") from None
        except (OSError, ValueError) as err:
            raise StorageError(f"cannot read {path}: {err}") from err

        try:
            return CacheRecord(
                id=data["ID"],
                fetch_time=datetime.fromisoformat(data["FetchTime"]),
                policy=Policy.from_json(data["Policy"]),
            )
        except (KeyError, TypeError, ValueError) as err:
            raise StorageError(f"malformed record in {path}: {err}") from err

    def _path(self, key: DomainName) -> Path:
        # Keys become file names; refuse anything that could escape the dir
        # or collide with temporary files.
        if not key or key.startswith(".") or "/" in key or os.sep in key or "\x00" in key:
            raise StorageError(f"invalid store key: {key!r}")
        return self._dir / key
