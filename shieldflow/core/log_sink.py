"""
Bounded connection log shown on the dashboard
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .constants import LOG_CAPACITY
from .types import LogEntry, Severity

logger = logging.getLogger(__name__)


class LogSink:
    """Newest-first log of human readable events"""

    def __init__(self, capacity: int = LOG_CAPACITY,
                 timestamp_source: Optional[Callable[[], str]] = None):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._timestamp = timestamp_source or (
            lambda: datetime.now().strftime('%H:%M:%S')
        )
        self._entries: List[LogEntry] = []
        self._observers: List[Callable[[LogEntry], None]] = []

    @property
    def entries(self) -> List[LogEntry]:
        """Entries, newest first"""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def subscribe(self, observer: Callable[[LogEntry], None]):
        self._observers.append(observer)

    def unsubscribe(self, observer: Callable[[LogEntry], None]):
        if observer in self._observers:
            self._observers.remove(observer)

    def record(self, message: str,
               severity: Severity = Severity.INFO) -> LogEntry:
        """Prepend an entry, dropping the oldest beyond capacity"""
        entry = LogEntry(
            id=uuid.uuid4().hex[:9],
            timestamp=self._timestamp(),
            message=message,
            severity=Severity(severity),
        )
        self._entries.insert(0, entry)
        del self._entries[self.capacity:]

        logger.debug(f"[{entry.severity.value}] {message}")

        for observer in list(self._observers):
            try:
                observer(entry)
            except Exception as e:
                logger.error(f"Log observer error: {e}")

        return entry

    def clear(self):
        self._entries.clear()

    def export(self, output_path: Path) -> Path:
        """Write the log oldest-first to a text file"""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            for entry in reversed(self._entries):
                f.write(
                    f"[{entry.timestamp}] {entry.severity.value.upper():7} "
                    f"{entry.message}\n"
                )

        logger.info(f"Connection log exported to: {output_path}")
        return output_path
