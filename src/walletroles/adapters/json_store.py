"""JSON document stores for the registry, snapshots and attribute table."""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, cast

from walletroles.domain.errors import PersistenceError

if TYPE_CHECKING:
    from walletroles.domain.ports import MappingStore

log = getLogger(__name__)


class JsonFileStore:
    """Whole-file JSON object store.

    A missing or blank file reads as ``{}``. Writes go to a temporary file in
    the same directory and are moved into place, so readers never observe a
    half-written document.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    async def load(self) -> dict[str, object]:
        return await asyncio.to_thread(self.load_now)

    async def save(self, data: dict[str, object]) -> None:
        await asyncio.to_thread(self._save_sync, data)

    def load_now(self) -> dict[str, object]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceError(f"{self.path} does not contain a JSON object")
        return cast(dict[str, object], payload)

    def _save_sync(self, data: dict[str, object]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, indent=2, ensure_ascii=False)
                    handle.write("\n")
                Path(tmp_name).replace(self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc
        log.debug("Wrote %s entries to %s", len(data), self.path)


def load_attribute_table(path: Path | str) -> dict[str, dict[str, object]]:
    """Read the asset attribute lookup; unreadable files yield an empty table."""

    store = JsonFileStore(path)
    try:
        raw = store.load_now()
    except PersistenceError:
        log.exception("Could not read asset attributes, composite labels will not match")
        return {}
    table: dict[str, dict[str, object]] = {}
    for key, value in raw.items():
        if isinstance(value, dict):
            table[key] = cast(dict[str, object], value)
    log.info("Loaded attributes for %s assets from %s", len(table), store.path)
    return table


if TYPE_CHECKING:

    def _store_check(store: JsonFileStore) -> MappingStore:
        return store
