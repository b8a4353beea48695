"""
===============================================================================
ORRERY - Frame Tree
===============================================================================
Every star, barycenter or body that has satellites owns a FrameTree listing
the bodies whose orbit frames are centered on it.

The tree carries a dirty bit and a handful of aggregates over its children
(classification mask, largest child radius, bounding sphere of the whole
subsystem). Invalidation is pull-based:

    mark_changed()   sets the dirty bit and propagates upward through the
                     owning body's own parent trees; never recomputes
    aggregate query  recomputes all aggregates once after a change
    mark_updated()   consumer acknowledgement; clears the dirty bit of this
                     tree and of every child tree

Mutations (timeline replacement, classification or culling radius changes)
call mark_changed(); render-side consumers read the aggregates once per
frame and then call mark_updated().
===============================================================================
"""

import logging
import weakref
from typing import Any, List, Optional

from orrery.bodies.attributes import BodyClassification
from orrery.core.exceptions import FrameGraphError
from orrery.frames.reference_frame import J2000EclipticFrame, ReferenceFrame
from orrery.frames.selection import SelectionType

logger = logging.getLogger(__name__)


class FrameTree:
    """
    Child-body list of one star, barycenter or body.

    Parameters
    ----------
    owner : Body, Star or Barycenter
        Object the tree belongs to. Held weakly.
    """

    def __init__(self, owner: Any) -> None:
        self._owner = weakref.ref(owner)
        self._children: List[Any] = []
        self._changed = True
        self._stale = True
        self._generation = 0
        self._refreshing = False
        self._default_frame: Optional[ReferenceFrame] = None

        self._child_class_mask = BodyClassification(0)
        self._max_child_radius = 0.0
        self._bounding_sphere_radius = 0.0
        self._contains_secondary_illuminators = False

    # =========================================================================
    # OWNER
    # =========================================================================

    @property
    def owner(self) -> Optional[Any]:
        return self._owner()

    @property
    def owner_body(self) -> Optional[Any]:
        """Owner when it is a Body; None for stars and barycenters."""
        owner = self._owner()
        if owner is not None and owner.SELECTION_TYPE is SelectionType.BODY:
            return owner
        return None

    def is_root(self) -> bool:
        """True for trees owned by a star or barycenter."""
        return self.owner_body is None

    @property
    def default_frame(self) -> ReferenceFrame:
        """J2000 ecliptic frame centered on the owner, created on first use."""
        if self._default_frame is None:
            self._default_frame = J2000EclipticFrame(self._owner())
        return self._default_frame

    # =========================================================================
    # CHILDREN
    # =========================================================================

    def add_child(self, body: Any) -> None:
        if any(child is body for child in self._children):
            return
        self._children.append(body)
        self.mark_changed()

    def remove_child(self, body: Any) -> None:
        for i, child in enumerate(self._children):
            if child is body:
                del self._children[i]
                self.mark_changed()
                return

    @property
    def children(self) -> List[Any]:
        return list(self._children)

    def child_count(self) -> int:
        return len(self._children)

    def get_child(self, index: int) -> Any:
        return self._children[index]

    # =========================================================================
    # CHANGE TRACKING
    # =========================================================================

    @property
    def changed(self) -> bool:
        return self._changed

    @property
    def generation(self) -> int:
        """Number of change notifications received so far."""
        return self._generation

    def mark_changed(self) -> None:
        """
        Flag the tree dirty and propagate to the owning body.

        Propagation stops at a tree whose aggregates are already stale, so a
        burst of mutations costs one walk up the hierarchy. The generation
        counter advances on every call.
        """
        self._generation += 1
        if self._changed and self._stale:
            return
        self._changed = True
        self._stale = True
        body = self.owner_body
        if body is not None:
            body.mark_changed()

    def mark_updated(self) -> None:
        """Clear the dirty bit here and in every descendant tree."""
        if not self._changed:
            return
        self._changed = False
        for child in self._children:
            tree = child.get_frame_tree()
            if tree is not None:
                tree.mark_updated()

    # =========================================================================
    # AGGREGATES
    # =========================================================================

    def child_class_mask(self) -> BodyClassification:
        """Union of the classifications of the direct children."""
        self._refresh()
        return self._child_class_mask

    def max_child_radius(self) -> float:
        """Largest radius (km) of any body in the subtree."""
        self._refresh()
        return self._max_child_radius

    def contains_secondary_illuminators(self) -> bool:
        self._refresh()
        return self._contains_secondary_illuminators

    def bounding_sphere_radius(self) -> float:
        """
        Radius (km) of a sphere about the owner enclosing every child orbit,
        child body and grandchild subsystem.
        """
        self._refresh()
        return self._bounding_sphere_radius

    def _refresh(self) -> None:
        if not self._stale:
            return
        if self._refreshing:
            raise FrameGraphError(f"Frame tree of {self._owner()!r} contains itself")
        self._refreshing = True
        try:
            self._recompute()
        finally:
            self._refreshing = False

    def _recompute(self) -> None:

        mask = BodyClassification(0)
        max_radius = 0.0
        bounding = 0.0
        illuminators = False
        owner = self._owner()

        for child in self._children:
            mask |= child.classification
            max_radius = max(max_radius, child.radius)
            illuminators = illuminators or child.is_secondary_illuminator

            r = child.culling_radius + child.orbit_bounding_radius_about(owner)
            tree = child.get_frame_tree()
            if tree is not None:
                r += tree.bounding_sphere_radius()
                max_radius = max(max_radius, tree.max_child_radius())
                illuminators = illuminators or tree.contains_secondary_illuminators()
            bounding = max(bounding, r)

        self._child_class_mask = mask
        self._max_child_radius = max_radius
        self._bounding_sphere_radius = bounding
        self._contains_secondary_illuminators = illuminators
        self._stale = False

        # The dirty bit stays set until a consumer calls mark_updated().
        logger.debug("Recomputed frame tree aggregates for %r (%d children)",
                     owner, len(self._children))

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return (f"FrameTree(owner={self._owner()!r}, children={len(self._children)}, "
                f"changed={self._changed})")
