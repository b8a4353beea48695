"""
===============================================================================
ORRERY - Timeline Test Suite
===============================================================================
Tests for timeline construction and validation, phase lookup at and around
boundaries, lifespan queries and change notification of attached frame trees.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from orrery.bodies.star import Star
from orrery.core.exceptions import OrreryError, TimelineError
from orrery.dynamics.orbit import FixedOrbit
from orrery.dynamics.rotation import ConstantOrientation
from orrery.frames.reference_frame import J2000EclipticFrame
from orrery.timeline.timeline import Timeline, TimelinePhase


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def star():
    """Frames only hold their center weakly, so tests keep the star here."""
    return Star("Sol")


@pytest.fixture
def make_phase(star):
    frame = J2000EclipticFrame(star)

    def _make(start, end, x=1.0):
        return TimelinePhase(start, end, frame, FixedOrbit([x, 0.0, 0.0]),
                             frame, ConstantOrientation())
    return _make


@pytest.fixture
def three_phases(make_phase):
    return Timeline([make_phase(0.0, 10.0, 1.0),
                     make_phase(10.0, 20.0, 2.0),
                     make_phase(20.0, 30.0, 3.0)])


# =============================================================================
# Test: Construction
# =============================================================================

class TestConstruction:

    def test_empty_timeline_rejected(self):
        with pytest.raises(TimelineError):
            Timeline([])

    def test_gap_rejected(self, make_phase):
        with pytest.raises(TimelineError, match="gap"):
            Timeline([make_phase(0.0, 10.0), make_phase(11.0, 20.0)])

    def test_overlap_rejected(self, make_phase):
        with pytest.raises(TimelineError, match="overlaps"):
            Timeline([make_phase(0.0, 10.0), make_phase(9.0, 20.0)])

    def test_phase_ending_before_start_rejected(self, make_phase):
        with pytest.raises(TimelineError):
            make_phase(5.0, 4.0)

    def test_timeline_error_is_value_error(self):
        assert issubclass(TimelineError, ValueError)
        assert issubclass(TimelineError, OrreryError)

    def test_single_phase_is_unbounded(self, star):
        frame = J2000EclipticFrame(star)
        tl = Timeline.single_phase(frame, FixedOrbit([0.0, 0.0, 0.0]),
                                   frame, ConstantOrientation())
        assert len(tl) == 1
        assert tl.start_time == float("-inf")
        assert tl.end_time == float("inf")
        assert tl.includes(-1.0e12)
        assert tl.includes(1.0e12)

    def test_components_shared_not_copied(self, star):
        frame = J2000EclipticFrame(star)
        orbit = FixedOrbit([1.0, 2.0, 3.0])
        tl = Timeline.single_phase(frame, orbit, frame, ConstantOrientation())
        assert tl.phase(0).orbit is orbit
        assert tl.phase(0).orbit_frame is frame


# =============================================================================
# Test: Phase lookup
# =============================================================================

class TestFindPhase:

    def test_single_phase_always_found(self, make_phase):
        p = make_phase(0.0, 10.0)
        tl = Timeline([p])
        for t in (-100.0, 0.0, 5.0, 10.0, 100.0):
            assert tl.find_phase(t) is p

    def test_two_phases_boundary_belongs_to_later(self, make_phase):
        p0, p1 = make_phase(0.0, 10.0), make_phase(10.0, 20.0)
        tl = Timeline([p0, p1])
        assert tl.find_phase(9.999999) is p0
        assert tl.find_phase(10.0) is p1

    @pytest.mark.parametrize("t,expected", [
        (0.0, 0),
        (5.0, 0),
        (10.0, 1),
        (19.5, 1),
        (20.0, 2),
        (29.9, 2),
    ])
    def test_three_phases(self, three_phases, t, expected):
        assert three_phases.find_phase(t) is three_phases.phase(expected)

    def test_clamps_before_first_phase(self, three_phases):
        assert three_phases.find_phase(-5.0) is three_phases.phase(0)

    def test_clamps_after_last_phase(self, three_phases):
        assert three_phases.find_phase(30.0) is three_phases.phase(2)
        assert three_phases.find_phase(1.0e6) is three_phases.phase(2)

    def test_phase_includes_is_half_open(self, three_phases):
        p = three_phases.phase(1)
        assert p.includes(10.0)
        assert not p.includes(20.0)
        assert p.duration == pytest.approx(10.0)


# =============================================================================
# Test: Lifespan
# =============================================================================

class TestLifespan:

    def test_start_and_end(self, three_phases):
        assert three_phases.start_time == 0.0
        assert three_phases.end_time == 30.0

    def test_includes(self, three_phases):
        assert not three_phases.includes(-0.001)
        assert three_phases.includes(0.0)
        assert three_phases.includes(29.999)
        assert not three_phases.includes(30.0)

    def test_iteration_order(self, three_phases):
        starts = [p.start_tdb for p in three_phases]
        assert starts == [0.0, 10.0, 20.0]
        assert len(three_phases) == 3
        assert three_phases.phases == tuple(three_phases)


# =============================================================================
# Test: Change notification
# =============================================================================

class TestNotification:

    def test_mark_changed_reaches_attached_tree(self, star, three_phases):
        tree = star.get_or_create_frame_tree()
        three_phases.attach_frame_tree(tree)
        tree.mark_updated()
        assert not tree.changed

        before = tree.generation
        three_phases.mark_changed()
        assert tree.changed
        assert tree.generation == before + 1

    def test_attach_is_idempotent(self, star, three_phases):
        tree = star.get_or_create_frame_tree()
        three_phases.attach_frame_tree(tree)
        three_phases.attach_frame_tree(tree)
        assert three_phases.frame_trees() == [tree]

    def test_detach(self, star, three_phases):
        tree = star.get_or_create_frame_tree()
        three_phases.attach_frame_tree(tree)
        three_phases.detach_frame_tree(tree)
        assert three_phases.frame_trees() == []

    def test_mark_changed_without_trees_is_harmless(self, three_phases):
        three_phases.mark_changed()
