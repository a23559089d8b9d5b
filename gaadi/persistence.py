"""
Persistence adapters: load/save primitives against a backing store.

Adapters do pure I/O. A failed read hands back the caller's default and a
failed write is logged and dropped; neither raises past the adapter.
"""

import copy
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

import yaml

from . import keys
from .errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_MISSING = object()


class PersistenceAdapter:
    """Base adapter. Subclasses implement _read, _write and _delete."""

    def bind_user(self, user_id: Optional[str]) -> None:
        """Scope subsequent calls to a user. Per-device stores ignore this."""

    def load(self, key: str, default: Any = None) -> Any:
        """Read a key, falling back to default when absent or unreadable."""
        try:
            value = self._read(key)
        except StorageReadError as e:
            logger.warning("Error reading key %r, using default: %s", key, e)
            return default
        if value is _MISSING:
            return default
        return value

    def save(self, key: str, value: Any) -> None:
        """Write a key. Failures are logged, not retried."""
        try:
            self._write(key, value)
        except StorageWriteError as e:
            logger.error("Error writing key %r: %s", key, e)

    def remove(self, key: str) -> None:
        try:
            self._delete(key)
        except StorageWriteError as e:
            logger.error("Error removing key %r: %s", key, e)

    def _read(self, key: str) -> Any:
        raise NotImplementedError

    def _write(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def _delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryAdapter(PersistenceAdapter):
    """Process-lifetime storage. Backs session-only state."""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def _read(self, key: str) -> Any:
        if key not in self._data:
            return _MISSING
        return copy.deepcopy(self._data[key])

    def _write(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)


class YamlFileAdapter(PersistenceAdapter):
    """
    Local storage: one YAML file per key inside a directory.

    Each key is replaced atomically; there is no transaction across keys.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.yaml"

    def _read(self, key: str) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return _MISSING
        try:
            with open(path, "r") as fp:
                data = yaml.safe_load(fp)
        except (OSError, yaml.YAMLError) as e:
            raise StorageReadError(str(e), key=key) from e
        return _MISSING if data is None else data

    def _write(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}_", suffix=".yaml", dir=str(self.directory)
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "w") as fp:
                yaml.safe_dump(
                    value,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
            os.replace(tmp_path, path)
        except (OSError, yaml.YAMLError) as e:
            raise StorageWriteError(str(e), key=key) from e
        finally:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()

    def _delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(str(e), key=key) from e


class DocumentClient(Protocol):
    """The remote document database, as far as the core is concerned."""

    def get(self, user_id: str, collection: str) -> List[Dict[str, Any]]: ...

    def put(self, collection: str, record: Dict[str, Any]) -> None: ...

    def update(self, collection: str, record_id: str, partial: Dict[str, Any]) -> None: ...

    def delete(self, collection: str, record_id: str) -> None: ...


class DocumentStoreAdapter(PersistenceAdapter):
    """
    Remote storage over a document database client.

    Collection keys map to document collections of records with an ``id``.
    Saving a collection diffs it against the last snapshot seen for that key
    and only sends the puts, updates and deletes needed. Singleton keys are
    stored as one record per user whose id is the user id.
    """

    def __init__(self, client: DocumentClient):
        self.client = client
        self.user_id: Optional[str] = None
        self._known: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def bind_user(self, user_id: Optional[str]) -> None:
        if user_id != self.user_id:
            self._known.clear()
        self.user_id = user_id

    def _fetch(self, key: str) -> List[Dict[str, Any]]:
        try:
            return list(self.client.get(self.user_id, key))
        except Exception as e:
            raise StorageReadError(str(e), key=key) from e

    def _index(self, key: str, records: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Records keyed by id. Raises StorageReadError for malformed records."""
        try:
            return {r["id"]: copy.deepcopy(r) for r in records}
        except (KeyError, TypeError) as e:
            raise StorageReadError(f"malformed record: {e!r}", key=key) from e

    def _snapshot(self, key: str) -> Dict[str, Dict[str, Any]]:
        if key not in self._known:
            self._known[key] = self._index(key, self._fetch(key))
        return self._known[key]

    def _read(self, key: str) -> Any:
        if self.user_id is None:
            return _MISSING
        records = self._fetch(key)
        self._known[key] = self._index(key, records)
        if key in keys.COLLECTIONS:
            return records
        for record in records:
            if record.get("id") == self.user_id:
                return record.get("value", _MISSING)
        return _MISSING

    def _write(self, key: str, value: Any) -> None:
        if self.user_id is None:
            raise StorageWriteError("no user bound to document store", key=key)
        if key in keys.COLLECTIONS:
            records = {r["id"]: r for r in value}
        else:
            records = {self.user_id: {"id": self.user_id, "userId": self.user_id, "value": value}}
        try:
            known = self._snapshot(key)
        except StorageReadError as e:
            raise StorageWriteError(str(e), key=key) from e
        try:
            for record_id, record in records.items():
                old = known.get(record_id)
                if old is None:
                    self.client.put(key, record)
                elif old != record:
                    partial = {k: v for k, v in record.items() if old.get(k) != v}
                    self.client.update(key, record_id, partial)
            for record_id in known:
                if record_id not in records:
                    self.client.delete(key, record_id)
        except Exception as e:
            # Unknown which calls landed; re-read on next save.
            self._known.pop(key, None)
            raise StorageWriteError(str(e), key=key) from e
        self._known[key] = copy.deepcopy(records)

    def _delete(self, key: str) -> None:
        if self.user_id is None:
            return
        try:
            known = self._snapshot(key)
            for record_id in list(known):
                self.client.delete(key, record_id)
        except Exception as e:
            self._known.pop(key, None)
            raise StorageWriteError(str(e), key=key) from e
        self._known[key] = {}
