"""Collection of usage statistics events for one run.

Producers hand events to a queue drained by a single consumer thread that
stamps each event with the run session id. Every enqueue is counted, and
``EventCollector.close`` waits until the consumer has appended all counted
events, so a flush never misses an event.
"""

import json
import platform
import queue
import threading
import time
import uuid
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from ..models.interfaces import TelemetrySinkInterface
from .logger import get_logger

logger = get_logger()

EVENTS_FILE_NAME = "fuser.json"
PROJECT_ID_KEY = "system_qdcld_project_id"
LIFECYCLE_GROUP = "qd.cl.lifecycle"
OS_GROUP = "qd.cl.system.os"


@dataclass
class FuserEvent:
    """A single statistics record."""

    group_id: str
    event_name: str
    event_data: dict[str, str]
    time: int
    state: bool
    session_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "groupId": data["group_id"],
            "eventName": data["event_name"],
            "eventData": data["event_data"],
            "time": data["time"],
            "state": data["state"],
            "sessionId": data["session_id"],
        }


class CompletionCounter:
    """Counts outstanding work items; ``wait`` blocks until the count drops to zero."""

    def __init__(self) -> None:
        self._count = 0
        self._condition = threading.Condition()

    def add(self, delta: int = 1) -> None:
        with self._condition:
            self._count += delta
            if self._count < 0:
                raise ValueError("CompletionCounter went negative")
            if self._count == 0:
                self._condition.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        with self._condition:
            return self._condition.wait_for(lambda: self._count == 0, timeout)

    @property
    def pending(self) -> int:
        with self._condition:
            return self._count


_STOP = object()


class EventCollector:
    """Per-run event queue with a single consumer thread."""

    def __init__(self, session_id: str | None = None) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.events: list[FuserEvent] = []
        self._queue: queue.Queue[Any] = queue.Queue()
        self._pending = CompletionCounter()
        self._closed = False
        self._lock = threading.Lock()
        self._consumer = threading.Thread(target=self._consume, name="scanprep-statistics", daemon=True)
        self._consumer.start()

    def _consume(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            item.session_id = self.session_id
            self.events.append(item)
            self._pending.done()

    def emit(self, event: FuserEvent) -> None:
        """Enqueue an event for the consumer."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Event collector is already closed")
            self._pending.add()
            self._queue.put(event)

    def close(self) -> None:
        """Refuse further events, wait for the accepted ones, then stop the consumer."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._pending.wait()
            self._queue.put(_STOP)
            self._consumer.join()

    def flush(
        self,
        results_dir: Path,
        device_id: str,
        sink: TelemetrySinkInterface | None = None,
        no_statistics: bool = False,
        allowed: bool = True,
    ) -> Path | None:
        """Close the collector and hand the events to the sink.

        Delivery is best effort: failures are logged and never raised.

        Returns:
            Path of the written events file, or None when nothing was sent
        """
        self.close()
        if no_statistics:
            logger.info("Statistics disabled, skipping event upload")
            return None
        if not allowed:
            logger.info("Sending statistics is not allowed, skipping event upload")
            return None

        events_file = results_dir / EVENTS_FILE_NAME
        try:
            results_dir.mkdir(parents=True, exist_ok=True)
            events_file.write_text(json.dumps([event.to_dict() for event in self.events]), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write events to {events_file}: {e}")
            return None

        if sink is not None:
            try:
                sink.send(events_file, device_id)
            except Exception as e:  # noqa: BLE001
                logger.warning(f"Failed to send statistics: {e}")
        return events_file


def current_timestamp() -> int:
    """Milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def common_event_data(version: str, project_id_hash: str | None = None) -> dict[str, str]:
    event_data = {"version": version}
    if project_id_hash:
        event_data[PROJECT_ID_KEY] = project_id_hash
    return event_data


def log_project_open(collector: EventCollector, version: str, project_id_hash: str | None = None) -> None:
    collector.emit(
        FuserEvent(
            group_id=LIFECYCLE_GROUP,
            event_name="project.opened",
            event_data=common_event_data(version, project_id_hash),
            time=current_timestamp(),
            state=False,
        ),
    )


def log_project_close(collector: EventCollector, version: str, project_id_hash: str | None = None) -> None:
    collector.emit(
        FuserEvent(
            group_id=LIFECYCLE_GROUP,
            event_name="project.closed",
            event_data=common_event_data(version, project_id_hash),
            time=current_timestamp(),
            state=False,
        ),
    )


def log_os(collector: EventCollector, version: str, project_id_hash: str | None = None) -> None:
    event_data = common_event_data(version, project_id_hash)
    event_data["name"] = platform.system().lower()
    event_data["arch"] = platform.machine()
    collector.emit(
        FuserEvent(
            group_id=OS_GROUP,
            event_name="os.name",
            event_data=event_data,
            time=current_timestamp(),
            state=True,
        ),
    )
