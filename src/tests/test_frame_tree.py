"""
===============================================================================
ORRERY - Frame Tree Test Suite
===============================================================================
Tests for frame-tree membership, dirty-bit propagation up the hierarchy,
consumer acknowledgement, cached aggregates (classification mask, bounding
sphere, largest child, secondary illuminators) and orbit classification of
invisible bodies.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from types import SimpleNamespace

import pytest

from orrery.bodies.attributes import BodyClassification
from orrery.bodies.body import Body
from orrery.bodies.star import Star
from orrery.core.exceptions import FrameGraphError, TimelineError
from orrery.dynamics.orbit import CircularOrbit, FixedOrbit
from orrery.dynamics.rotation import ConstantOrientation
from orrery.frames.reference_frame import J2000EclipticFrame
from orrery.timeline.timeline import Timeline, TimelinePhase


# =============================================================================
# Helpers
# =============================================================================

def orbiting(body, center, radius, **kwargs):
    """Give body a one-phase circular orbit about center."""
    body.set_timeline(Timeline.single_phase(
        J2000EclipticFrame(center), CircularOrbit(radius, 30.0),
        J2000EclipticFrame(body), ConstantOrientation(), **kwargs))
    return body


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def hierarchy():
    star = Star("Sol")
    planet = Body("Terra")
    planet.set_radius(6000.0)
    planet.set_classification(BodyClassification.PLANET)
    orbiting(planet, star, 1.0e8)

    moon = Body("Selene")
    moon.set_radius(1700.0)
    moon.set_classification(BodyClassification.MOON)
    orbiting(moon, planet, 4.0e5)

    return SimpleNamespace(star=star, planet=planet, moon=moon,
                           star_tree=star.get_frame_tree(),
                           planet_tree=planet.get_frame_tree())


# =============================================================================
# Test: Membership
# =============================================================================

class TestMembership:

    def test_children(self, hierarchy):
        assert hierarchy.star_tree.children == [hierarchy.planet]
        assert hierarchy.planet_tree.children == [hierarchy.moon]
        assert hierarchy.moon.get_frame_tree() is None

    def test_owner(self, hierarchy):
        assert hierarchy.star_tree.owner is hierarchy.star
        assert hierarchy.star_tree.is_root()
        assert hierarchy.star_tree.owner_body is None
        assert hierarchy.planet_tree.owner_body is hierarchy.planet
        assert not hierarchy.planet_tree.is_root()

    def test_default_frame(self, hierarchy):
        frame = hierarchy.planet_tree.default_frame
        assert isinstance(frame, J2000EclipticFrame)
        assert frame.center.body is hierarchy.planet
        assert hierarchy.planet_tree.default_frame is frame

    def test_add_child_deduplicates(self, hierarchy):
        hierarchy.planet_tree.add_child(hierarchy.moon)
        assert hierarchy.planet_tree.child_count() == 1
        assert len(hierarchy.planet_tree) == 1
        assert hierarchy.planet_tree.get_child(0) is hierarchy.moon

    def test_timeline_replacement_moves_child(self, hierarchy):
        old = hierarchy.moon.timeline
        orbiting(hierarchy.moon, hierarchy.star, 2.0e8)
        assert hierarchy.planet_tree.children == []
        assert hierarchy.moon in hierarchy.star_tree.children
        assert old.frame_trees() == []
        assert hierarchy.moon.timeline.frame_trees() == [hierarchy.star_tree]

    def test_multi_phase_timeline_joins_every_center(self, hierarchy):
        probe = Body("Probe")
        frame_s = J2000EclipticFrame(hierarchy.star)
        frame_p = J2000EclipticFrame(hierarchy.planet)
        probe.set_timeline(Timeline([
            TimelinePhase(0.0, 10.0, frame_s, FixedOrbit([1.0e8, 0.0, 0.0]),
                          frame_s, ConstantOrientation()),
            TimelinePhase(10.0, 20.0, frame_p, FixedOrbit([1.0e4, 0.0, 0.0]),
                          frame_p, ConstantOrientation()),
        ]))
        assert probe in hierarchy.star_tree.children
        assert probe in hierarchy.planet_tree.children
        assert len(probe.timeline.frame_trees()) == 2

    def test_same_timeline_is_noop(self, hierarchy):
        gen = hierarchy.planet_tree.generation
        hierarchy.moon.set_timeline(hierarchy.moon.timeline)
        assert hierarchy.planet_tree.generation == gen

    def test_none_timeline_rejected(self, hierarchy):
        with pytest.raises(TimelineError):
            hierarchy.moon.set_timeline(None)


# =============================================================================
# Test: Change propagation
# =============================================================================

class TestChangePropagation:

    def test_mark_updated_clears_subtree(self, hierarchy):
        hierarchy.star_tree.mark_updated()
        assert not hierarchy.star_tree.changed
        assert not hierarchy.planet_tree.changed

    def test_moon_change_reaches_star(self, hierarchy):
        hierarchy.star_tree.mark_updated()
        hierarchy.moon.set_radius(2000.0)
        assert hierarchy.planet_tree.changed
        assert hierarchy.star_tree.changed

    def test_planet_change_does_not_dirty_children(self, hierarchy):
        hierarchy.star_tree.mark_updated()
        hierarchy.planet.set_radius(7000.0)
        assert hierarchy.star_tree.changed
        assert not hierarchy.planet_tree.changed

    def test_new_satellite_tree_reaches_star(self):
        star = Star("Sol")
        planet = orbiting(Body("Terra"), star, 1.0e8)
        star_tree = star.get_frame_tree()
        before = star_tree.bounding_sphere_radius()
        star_tree.mark_updated()

        orbiting(Body("Selene"), planet, 4.0e5)
        assert star_tree.changed
        assert star_tree.bounding_sphere_radius() > before

    def test_generation_counts_notifications(self, hierarchy):
        gen = hierarchy.planet_tree.generation
        hierarchy.moon.set_radius(2000.0)
        hierarchy.moon.set_radius(2500.0)
        assert hierarchy.planet_tree.generation == gen + 2

    def test_no_notification_without_net_change(self, hierarchy):
        gen = hierarchy.planet_tree.generation
        hierarchy.moon.set_radius(1700.0)
        assert hierarchy.planet_tree.generation == gen

    def test_mark_updated_through_body(self, hierarchy):
        hierarchy.planet.mark_updated()
        assert not hierarchy.planet_tree.changed


# =============================================================================
# Test: Aggregates
# =============================================================================

class TestAggregates:

    def test_bounding_sphere(self, hierarchy):
        expected_planet = 1700.0 + 4.0e5
        assert hierarchy.planet_tree.bounding_sphere_radius() == pytest.approx(expected_planet)
        assert hierarchy.star_tree.bounding_sphere_radius() == pytest.approx(
            6000.0 + 1.0e8 + expected_planet)

    def test_bounding_sphere_follows_changes(self, hierarchy):
        before = hierarchy.star_tree.bounding_sphere_radius()
        hierarchy.moon.set_radius(3700.0)
        assert hierarchy.star_tree.bounding_sphere_radius() == pytest.approx(before + 2000.0)

    def test_max_child_radius(self, hierarchy):
        assert hierarchy.planet_tree.max_child_radius() == pytest.approx(1700.0)
        assert hierarchy.star_tree.max_child_radius() == pytest.approx(6000.0)
        hierarchy.moon.set_radius(9000.0)
        assert hierarchy.star_tree.max_child_radius() == pytest.approx(9000.0)

    def test_child_class_mask_direct_children(self, hierarchy):
        assert hierarchy.star_tree.child_class_mask() == BodyClassification.PLANET
        assert hierarchy.planet_tree.child_class_mask() == BodyClassification.MOON

    def test_secondary_illuminators(self, hierarchy):
        assert hierarchy.star_tree.contains_secondary_illuminators()
        hierarchy.planet.set_secondary_illuminator(False)
        hierarchy.moon.set_secondary_illuminator(False)
        assert not hierarchy.star_tree.contains_secondary_illuminators()
        hierarchy.moon.set_secondary_illuminator(True)
        assert hierarchy.star_tree.contains_secondary_illuminators()

    def test_aggregates_do_not_clear_dirty_bit(self, hierarchy):
        hierarchy.star_tree.bounding_sphere_radius()
        assert hierarchy.star_tree.changed

    def test_cyclic_trees_detected(self):
        star = Star("Sol")
        a = orbiting(Body("A"), star, 1.0e6)
        b = orbiting(Body("B"), a, 1.0e3)
        orbiting(a, b, 1.0e3)
        with pytest.raises(FrameGraphError):
            b.get_frame_tree().bounding_sphere_radius()


# =============================================================================
# Test: Orbit classification
# =============================================================================

class TestOrbitClassification:

    def test_visible_body_keeps_its_class(self, hierarchy):
        assert hierarchy.planet.get_orbit_classification() == BodyClassification.PLANET

    def test_invisible_borrows_highest_priority_child(self):
        star = Star("Sol")
        bary = orbiting(Body("Pair barycenter"), star, 5.0e9)
        bary.set_classification(BodyClassification.INVISIBLE)
        moon = orbiting(Body("Moonlet"), bary, 2.0e4)
        moon.set_classification(BodyClassification.MOON)
        rock = orbiting(Body("Rock"), bary, 1.0e4)
        rock.set_classification(BodyClassification.ASTEROID)
        assert bary.get_orbit_classification() == BodyClassification.ASTEROID

    def test_invisible_without_children(self):
        star = Star("Sol")
        bary = orbiting(Body("Empty barycenter"), star, 5.0e9)
        bary.set_classification(BodyClassification.INVISIBLE)
        assert bary.get_orbit_classification() == BodyClassification.INVISIBLE
