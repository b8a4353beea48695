"""
===============================================================================
ORRERY - Timelines
===============================================================================
A timeline partitions a body's existence into contiguous, non-overlapping
phases. Each phase binds, for the half-open interval [start_tdb, end_tdb):

    orbit_frame     frame the orbit's positions are expressed in
    orbit           position / velocity relative to orbit_frame's center
    body_frame      frame the rotation model is expressed in
    rotation_model  orientation / angular velocity relative to body_frame

Frames, orbits and rotation models are shared by reference; a timeline never
copies them.

Malformed timelines (no phases, unsorted, gapped or overlapping phases) are
rejected at construction with TimelineError, so every Timeline that exists
satisfies:

    phases[0].start_tdb <= ... and phases[i].end_tdb == phases[i+1].start_tdb

find_phase() is a binary search on start times. Times before the first
phase clamp to the first phase; times at or after the last phase's end clamp
to the last one. Callers that care about existence check includes().
===============================================================================
"""

import logging
import weakref
from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

from orrery.core.exceptions import TimelineError
from orrery.dynamics.orbit import Orbit
from orrery.dynamics.rotation import RotationModel
from orrery.frames.reference_frame import ReferenceFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TimelinePhase:
    """
    One interval of a timeline.

    Attributes
    ----------
    start_tdb, end_tdb : float
        Interval bounds (TDB Julian dates); end is exclusive. Infinite bounds
        are allowed for the first and last phases.
    orbit_frame : ReferenceFrame
    orbit : Orbit
    body_frame : ReferenceFrame
    rotation_model : RotationModel
    """
    start_tdb: float
    end_tdb: float
    orbit_frame: ReferenceFrame
    orbit: Orbit
    body_frame: ReferenceFrame
    rotation_model: RotationModel

    def __post_init__(self) -> None:
        if self.end_tdb < self.start_tdb:
            raise TimelineError(
                f"Phase ends before it starts ({self.start_tdb} > {self.end_tdb})"
            )

    def includes(self, tdb: float) -> bool:
        return self.start_tdb <= tdb < self.end_tdb

    @property
    def duration(self) -> float:
        return self.end_tdb - self.start_tdb


class Timeline:
    """
    Ordered, contiguous sequence of TimelinePhase objects.

    Parameters
    ----------
    phases : sequence of TimelinePhase
        At least one phase, sorted by start time, each starting exactly where
        the previous one ends.

    Raises
    ------
    TimelineError
        If the phase sequence is empty, unsorted or not contiguous.
    """

    def __init__(self, phases: Sequence[TimelinePhase]) -> None:
        phases = list(phases)
        if not phases:
            raise TimelineError("A timeline needs at least one phase")

        for i in range(1, len(phases)):
            prev, cur = phases[i - 1], phases[i]
            if cur.start_tdb != prev.end_tdb:
                kind = "overlaps" if cur.start_tdb < prev.end_tdb else "leaves a gap after"
                raise TimelineError(
                    f"Phase {i} (start {cur.start_tdb}) {kind} phase {i - 1} "
                    f"(end {prev.end_tdb})"
                )

        self._phases: Tuple[TimelinePhase, ...] = tuple(phases)
        self._starts: List[float] = [p.start_tdb for p in phases]
        self._frame_trees: List[weakref.ref] = []

    @classmethod
    def single_phase(cls, orbit_frame: ReferenceFrame, orbit: Orbit,
                     body_frame: ReferenceFrame, rotation_model: RotationModel,
                     start_tdb: float = float("-inf"),
                     end_tdb: float = float("inf")) -> 'Timeline':
        """Timeline with one phase, unbounded unless limits are given."""
        return cls([TimelinePhase(start_tdb, end_tdb, orbit_frame, orbit,
                                  body_frame, rotation_model)])

    # =========================================================================
    # QUERIES
    # =========================================================================

    def find_phase(self, tdb: float) -> TimelinePhase:
        """Phase active at tdb, clamped to the first or last phase."""
        i = bisect_right(self._starts, tdb) - 1
        i = min(max(i, 0), len(self._phases) - 1)
        return self._phases[i]

    def phase(self, index: int) -> TimelinePhase:
        return self._phases[index]

    @property
    def phases(self) -> Tuple[TimelinePhase, ...]:
        return self._phases

    @property
    def start_time(self) -> float:
        return self._phases[0].start_tdb

    @property
    def end_time(self) -> float:
        return self._phases[-1].end_tdb

    def includes(self, tdb: float) -> bool:
        return self.start_time <= tdb < self.end_time

    def __len__(self) -> int:
        return len(self._phases)

    def __iter__(self) -> Iterator[TimelinePhase]:
        return iter(self._phases)

    # =========================================================================
    # CHANGE NOTIFICATION
    # =========================================================================

    def attach_frame_tree(self, tree) -> None:
        """Register a frame tree that receives this timeline's notifications."""
        if tree not in self.frame_trees():
            self._frame_trees.append(weakref.ref(tree))

    def detach_frame_tree(self, tree) -> None:
        self._frame_trees = [ref for ref in self._frame_trees
                             if ref() is not None and ref() is not tree]

    def frame_trees(self) -> list:
        return [t for t in (ref() for ref in self._frame_trees) if t is not None]

    def mark_changed(self) -> None:
        """Notify every attached frame tree. Recomputes nothing."""
        for tree in self.frame_trees():
            tree.mark_changed()

    def __repr__(self) -> str:
        return (f"Timeline(phases={len(self._phases)}, "
                f"start={self.start_time}, end={self.end_time})")
