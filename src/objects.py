"""
Objects on the belt and the collection that holds them.

The arena keeps objects in id order. Retired objects (sorted or missed)
stay in place until compact() evicts them, after which only their terminal
outcome is retained.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

SORTED = "sorted"
MISSED = "missed"


@dataclass
class SimObject:
    """One physical item on the belt."""
    id: int
    position: float
    spawn_time: float
    sorted: bool = False
    outcome: Optional[str] = None  # SORTED or MISSED once retired
    retired_at: Optional[float] = None

    def retire(self, outcome: str, time: float):
        """Move the object into its terminal state.

        Args:
            outcome: SORTED or MISSED
            time: Simulated time of retirement

        Raises:
            RuntimeError: if the object was already retired
        """
        if self.sorted:
            raise RuntimeError(
                f"object {self.id} already retired as {self.outcome!r}, cannot mark {outcome!r}"
            )
        if outcome not in (SORTED, MISSED):
            raise ValueError(f"unknown outcome {outcome!r}")
        self.sorted = True
        self.outcome = outcome
        self.retired_at = time


def in_window(position: float, pick_position: float, sensor_range: float) -> bool:
    """True if position lies inside [pick - range, pick + range]."""
    return abs(position - pick_position) <= sensor_range


def first_in_window(
    objects: Iterable[SimObject],
    pick_position: float,
    sensor_range: float,
) -> Optional[SimObject]:
    """Return the first unsorted object inside the detection window.

    Iteration order is the scan order, which for an arena is id order.
    """
    for obj in objects:
        if not obj.sorted and in_window(obj.position, pick_position, sensor_range):
            return obj
    return None


class ObjectArena:
    """Index-stable, id-ordered object collection with periodic compaction."""

    def __init__(self):
        self._objects: List[SimObject] = []
        self.outcomes: Dict[int, str] = {}  # evicted id -> outcome
        self._last_id: Optional[int] = None

    def add(self, obj: SimObject):
        if self._last_id is not None and obj.id <= self._last_id:
            raise ValueError(
                f"object ids must be strictly increasing (got {obj.id} after {self._last_id})"
            )
        self._objects.append(obj)
        self._last_id = obj.id

    def active(self) -> List[SimObject]:
        """Unsorted objects in id order."""
        return [obj for obj in self._objects if not obj.sorted]

    def compact(self) -> int:
        """Evict retired objects, keeping the survivors' relative order.

        Returns:
            Number of objects evicted
        """
        kept = []
        for obj in self._objects:
            if obj.sorted:
                self.outcomes[obj.id] = obj.outcome
            else:
                kept.append(obj)
        evicted = len(self._objects) - len(kept)
        self._objects = kept
        return evicted

    def outcome_of(self, object_id: int) -> Optional[str]:
        if object_id in self.outcomes:
            return self.outcomes[object_id]
        for obj in self._objects:
            if obj.id == object_id:
                return obj.outcome
        return None

    def terminal_states(self) -> Dict[int, str]:
        """Map every retired object id to its outcome."""
        states = dict(self.outcomes)
        for obj in self._objects:
            if obj.sorted:
                states[obj.id] = obj.outcome
        return dict(sorted(states.items()))

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[SimObject]:
        return iter(self._objects)
