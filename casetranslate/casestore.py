"""Local case file standing in for the host review application.

A case file is a JSON document shaped as::

    {"items": [{"guid": "...", "name": "...", "text": "...",
                "customMetadata": {"Field": "value"}, "tags": ["A|B"]}]}

Items are only mutable inside :meth:`CaseStore.with_write_access`.
"""

from __future__ import annotations

import json
import logging
import os
import pathlib
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .errors import ItemStoreError

logger = logging.getLogger(__name__)


class CustomMetadata:
    """Custom metadata of a single item."""

    def __init__(self, item: "CaseItem", values: Dict[str, Any]) -> None:
        self._item = item
        self._values = dict(values)

    def put_text(self, field: str, value: str) -> None:
        self._item._require_write_access()
        self._values[field] = str(value)

    def get(self, field: str, default: Any = None) -> Any:
        return self._values.get(field, default)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, field: object) -> bool:
        return field in self._values


class ItemModifier:
    """Collects text changes made inside :meth:`CaseItem.modify`."""

    def __init__(self) -> None:
        self.replacement: Optional[str] = None

    def replace_text(self, text: str) -> None:
        self.replacement = text


class CaseItem:
    """One document in the case: text, custom metadata and tags."""

    def __init__(
        self,
        store: "CaseStore",
        *,
        guid: str,
        name: str,
        text: str,
        custom_metadata: Dict[str, Any],
        tags: Sequence[str],
    ) -> None:
        self._store = store
        self.guid = guid
        self.name = name
        self._text = text
        self.custom_metadata = CustomMetadata(self, custom_metadata)
        self._tags: List[str] = []
        for tag in tags:
            if tag not in self._tags:
                self._tags.append(tag)

    @property
    def text(self) -> str:
        return self._text

    @property
    def tags(self) -> frozenset[str]:
        return frozenset(self._tags)

    def add_tag(self, path: str) -> None:
        self._require_write_access()
        if path not in self._tags:
            self._tags.append(path)

    @contextmanager
    def modify(self) -> Iterator[ItemModifier]:
        """Stage text changes; they apply only if the block completes."""

        self._require_write_access()
        modifier = ItemModifier()
        yield modifier
        if modifier.replacement is not None:
            self._text = modifier.replacement

    def to_record(self) -> Dict[str, Any]:
        return {
            "guid": self.guid,
            "name": self.name,
            "text": self._text,
            "customMetadata": self.custom_metadata.as_dict(),
            "tags": list(self._tags),
        }

    def _require_write_access(self) -> None:
        if not self._store.write_access:
            raise ItemStoreError(
                f"Item {self.guid} can only be modified within a write-access scope."
            )

    def __repr__(self) -> str:
        return f"CaseItem(guid={self.guid!r}, name={self.name!r})"


class CaseStore:
    """Holds the items of a case and persists them to a JSON file."""

    def __init__(self, path: pathlib.Path, records: Sequence[Dict[str, Any]]) -> None:
        self.path = path
        self.write_access = False
        self.items: List[CaseItem] = [self._build_item(record) for record in records]
        self._by_guid = {item.guid: item for item in self.items}
        if len(self._by_guid) != len(self.items):
            raise ItemStoreError(f"Case file {path} contains duplicate item GUIDs.")

    @classmethod
    def open(cls, path: pathlib.Path) -> "CaseStore":
        if not path.exists():
            raise ItemStoreError(f"Case file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ItemStoreError(f"Case file {path} could not be read: {exc}") from exc

        records = data.get("items") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise ItemStoreError(
                f"Invalid case file {path}: expected an object with an 'items' list."
            )
        return cls(path, records)

    @property
    def lock_path(self) -> pathlib.Path:
        return self.path.with_name(self.path.name + ".lock")

    def select(self, guids: Optional[Sequence[str]] = None) -> List[CaseItem]:
        """Return a snapshot of items, in case order or in the given GUID order."""

        if not guids:
            return list(self.items)
        missing = [guid for guid in guids if guid not in self._by_guid]
        if missing:
            raise ItemStoreError("Unknown item GUIDs: " + ", ".join(missing))
        return [self._by_guid[guid] for guid in guids]

    @contextmanager
    def with_write_access(self) -> Iterator["CaseStore"]:
        """Hold the case exclusively; persist and release on exit."""

        if self.write_access:
            raise ItemStoreError("Write access is already held for this case.")
        self._acquire_lock()
        self.write_access = True
        try:
            yield self
        finally:
            self.write_access = False
            try:
                self.save()
            finally:
                self._release_lock()

    def save(self) -> None:
        payload = {"items": [item.to_record() for item in self.items]}
        temp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex}.tmp")
        try:
            temp_path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            os.replace(temp_path, self.path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise ItemStoreError(f"Case file {self.path} could not be written: {exc}") from exc
        logger.debug("Saved %d items to %s", len(self.items), self.path)

    def _acquire_lock(self) -> None:
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as exc:
            raise ItemStoreError(
                f"Case {self.path} is locked by another process ({self.lock_path})."
            ) from exc
        except OSError as exc:
            raise ItemStoreError(f"Could not lock case {self.path}: {exc}") from exc
        with os.fdopen(fd, "w") as handle:
            handle.write(str(os.getpid()))

    def _release_lock(self) -> None:
        self.lock_path.unlink(missing_ok=True)

    def _build_item(self, record: Any) -> CaseItem:
        if not isinstance(record, dict):
            raise ItemStoreError(f"Invalid item in case file {self.path}: {record!r}")
        guid = record.get("guid") or str(uuid.uuid4())
        text = record.get("text") or ""
        metadata = record.get("customMetadata") or {}
        tags = record.get("tags") or []
        if not isinstance(text, str) or not isinstance(metadata, dict) or not isinstance(tags, list):
            raise ItemStoreError(f"Invalid fields for item {guid} in {self.path}.")
        return CaseItem(
            self,
            guid=str(guid),
            name=str(record.get("name") or guid),
            text=text,
            custom_metadata=metadata,
            tags=[str(tag) for tag in tags],
        )
