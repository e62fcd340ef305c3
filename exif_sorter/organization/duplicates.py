import threading
from datetime import datetime
from typing import Dict

from ..models import FIRST, DuplicateCheck


class DuplicateIndex:
    """
    Maps an exact capture timestamp to the base name of the first file placed
    under it. Lives for a single run and is never persisted.

    Two captures are duplicates only if their timestamps are equal to the
    second; file contents are never compared.
    """

    def __init__(self):
        self._first_names: Dict[datetime, str] = {}
        self._lock = threading.Lock()

    def check_and_register(self, timestamp: datetime, base_name: str) -> DuplicateCheck:
        """
        Returns FIRST and records `base_name` if `timestamp` is new, otherwise
        the base name recorded for it. Existing entries are never overwritten.
        """
        with self._lock:
            existing = self._first_names.get(timestamp)
            if existing is None:
                self._first_names[timestamp] = base_name
                return FIRST
            return DuplicateCheck(original_base_name=existing)

    def __contains__(self, timestamp: datetime) -> bool:
        with self._lock:
            return timestamp in self._first_names

    def __len__(self) -> int:
        with self._lock:
            return len(self._first_names)
