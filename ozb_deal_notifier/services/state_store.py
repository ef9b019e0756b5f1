"""
Persistence of novelty state.

State lives in a small key-value store under two keys: the guid of the
newest record seen by the last processed run, and the bounded seen-guid
list serialised as a JSON array. Stores only need get/put, so the same
repository works over a local JSON file or an in-memory dict.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from ..interfaces import IStateStore
from ..models.state import NoveltyState

logger = logging.getLogger(__name__)

LAST_GUID_KEY = "last_guid"
SEEN_GUIDS_KEY = "seen_guids"


class InMemoryStateStore:
    """Dict-backed store, used for tests and one-shot runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStateStore:
    """Key-value store persisted as a single JSON object on disk."""

    def __init__(self, state_file: str = "data/state.json"):
        """
        Initialize file-backed store.

        Args:
            state_file: Path of the JSON file holding all keys
        """
        self.state_file = Path(state_file)

    def _read(self) -> Dict[str, str]:
        if not self.state_file.exists():
            return {}
        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read state from {self.state_file}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value

        self.state_file.parent.mkdir(parents=True, exist_ok=True)

        # Write to a sibling temp file and rename so a crash never leaves a torn file
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.state_file.parent), prefix=".state-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.state_file)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class NoveltyStateRepository:
    """Loads and saves NoveltyState through a key-value store."""

    def __init__(self, store: IStateStore):
        self.store = store

    def load(self) -> NoveltyState:
        """Read the stored state; missing or corrupt values read as empty."""
        last_guid = self.store.get(LAST_GUID_KEY) or None
        return NoveltyState(last_guid=last_guid, seen_guids=self._load_seen())

    def _load_seen(self) -> List[str]:
        raw = self.store.get(SEEN_GUIDS_KEY)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored seen guid list is not valid JSON, ignoring it")
            return []
        if not isinstance(parsed, list):
            return []
        return [guid for guid in parsed if isinstance(guid, str)]

    def save(self, state: NoveltyState) -> None:
        """Persist the state; the seen list is written before the cursor."""
        self.store.put(SEEN_GUIDS_KEY, json.dumps(list(state.seen_guids)))
        if state.last_guid:
            self.store.put(LAST_GUID_KEY, state.last_guid)
        logger.debug(
            f"Saved novelty state: last_guid={state.last_guid!r}, "
            f"{len(state.seen_guids)} seen guids"
        )
