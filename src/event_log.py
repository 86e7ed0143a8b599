"""
Event logging for the sorting line.
Keeps an in-memory log and optionally mirrors it to CSV.
"""

import csv
from pathlib import Path
from dataclasses import dataclass, asdict
from typing import List, Optional
import pandas as pd
import config

EVENT_TYPES = (
    "spawn",
    "missed",
    "false_negative",
    "detection",
    "false_positive",
    "armed",
    "sorted",
    "cycle_complete",
)


@dataclass
class Event:
    """A single event on the sorting line."""
    timestamp: float
    event_type: str
    object_id: Optional[int] = None
    position: Optional[float] = None
    detail: Optional[float] = None


class EventLog:
    """Manages event logging to memory and, optionally, CSV."""

    def __init__(self, output_dir: Optional[str] = None, run_id: str = "default"):
        """Initialize event logger.

        Args:
            output_dir: Directory to store CSV logs; None keeps the log in memory only
            run_id: Identifier for this run (used in filename)
        """
        self.run_id = run_id
        self.events: List[Event] = []

        self.csv_path: Optional[Path] = None
        if output_dir is not None:
            self.output_dir = Path(output_dir)
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.csv_path = self.output_dir / f"events_{run_id}.csv"
            self._init_csv()

    def _init_csv(self):
        """Initialize CSV file with header."""
        with open(self.csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=config.EVENT_LOG_COLUMNS)
            writer.writeheader()

    def log_event(self, event: Event):
        """Log a single event to memory and CSV.

        Args:
            event: Event object to log
        """
        if event.event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event type {event.event_type!r}")
        self.events.append(event)

        if self.csv_path is not None:
            with open(self.csv_path, "a", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=config.EVENT_LOG_COLUMNS)
                writer.writerow(asdict(event))

    def log(self, timestamp: float, event_type: str, object_id: Optional[int] = None,
            position: Optional[float] = None, detail: Optional[float] = None):
        """Shorthand for log_event(Event(...))."""
        self.log_event(Event(timestamp, event_type, object_id, position, detail))

    def get_dataframe(self) -> pd.DataFrame:
        """Return in-memory events as pandas DataFrame."""
        if not self.events:
            return pd.DataFrame(columns=config.EVENT_LOG_COLUMNS)

        return pd.DataFrame([asdict(e) for e in self.events])

    def get_events_since(self, timestamp: float) -> List[Event]:
        """Get all events after a given timestamp."""
        return [e for e in self.events if e.timestamp > timestamp]

    def get_by_type(self, event_type: str) -> List[Event]:
        return [e for e in self.events if e.event_type == event_type]

    def count(self, event_type: str) -> int:
        return sum(1 for e in self.events if e.event_type == event_type)

    def save_csv(self) -> Optional[str]:
        """Return path to CSV file, if one is being written."""
        return str(self.csv_path) if self.csv_path is not None else None
