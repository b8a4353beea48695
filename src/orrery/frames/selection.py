"""
===============================================================================
ORRERY - Selection
===============================================================================
A Selection is a non-owning tagged reference to whichever object a reference
frame uses as its center: a Body, a Star or a Barycenter. It holds a weak
reference, so a Selection never keeps its referent alive; once the referent
is collected the selection reads as NONE. Resolving a selection whose
referent was collected raises FrameGraphError; only a selection built empty
resolves to the origin.

Referents announce their tag through a SELECTION_TYPE class attribute and
implement the private resolution hooks _position(tdb, depth),
_velocity(tdb, depth), _orientation(tdb, depth) and
_angular_velocity(tdb, depth). The depth counter is threaded through every
recursive resolution step so that a malformed (cyclic) frame graph fails
with FrameGraphError instead of recursing forever.
===============================================================================
"""

import weakref
from enum import Enum
from typing import Any, Optional

import numpy as np

from orrery.core.config import get_settings
from orrery.core.exceptions import FrameGraphError
from orrery.core.universal_coord import UniversalCoord


class SelectionType(Enum):
    NONE = 0
    BODY = 1
    STAR = 2
    BARYCENTER = 3


def check_frame_depth(depth: int, obj: Any) -> None:
    """
    Raise FrameGraphError once a resolution walk exceeds max_frame_depth.

    Parameters
    ----------
    depth : int
        Number of frame centers visited so far.
    obj : object
        Object being resolved at this depth, named in the error.
    """
    limit = get_settings().max_frame_depth
    if depth > limit:
        name = getattr(obj, "name", repr(obj))
        raise FrameGraphError(
            f"Frame center chain deeper than {limit} while resolving "
            f"'{name}'; the frame graph is probably cyclic"
        )


class Selection:
    """
    Weak tagged reference to a frame center.

    Parameters
    ----------
    obj : Body, Star or Barycenter, optional
        Referent. None gives an empty selection.
    """

    __slots__ = ("_ref", "_type", "__weakref__")

    def __init__(self, obj: Any = None) -> None:
        if obj is None:
            self._ref = None
            self._type = SelectionType.NONE
            return

        sel_type = getattr(obj, "SELECTION_TYPE", None)
        if not isinstance(sel_type, SelectionType) or sel_type is SelectionType.NONE:
            raise TypeError(f"{type(obj).__name__} cannot be selected as a frame center")
        self._ref = weakref.ref(obj)
        self._type = sel_type

    # =========================================================================
    # REFERENT ACCESS
    # =========================================================================

    @property
    def obj(self) -> Optional[Any]:
        """The referent, or None when empty or collected."""
        return self._ref() if self._ref is not None else None

    @property
    def type(self) -> SelectionType:
        if self.obj is None:
            return SelectionType.NONE
        return self._type

    def _typed(self, sel_type: SelectionType) -> Optional[Any]:
        obj = self.obj
        if obj is not None and self._type is sel_type:
            return obj
        return None

    @property
    def body(self):
        return self._typed(SelectionType.BODY)

    @property
    def star(self):
        return self._typed(SelectionType.STAR)

    @property
    def barycenter(self):
        return self._typed(SelectionType.BARYCENTER)

    def is_empty(self) -> bool:
        return self.obj is None

    def get_name(self, i18n: bool = False) -> str:
        obj = self.obj
        if obj is None:
            return ""
        return obj.get_name(i18n)

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def get_position(self, tdb: float) -> UniversalCoord:
        """Universal position of the referent; the origin when empty."""
        return self._position(tdb, 0)

    def get_velocity(self, tdb: float) -> np.ndarray:
        """Universal velocity (km/day) of the referent; zero when empty."""
        return self._velocity(tdb, 0)

    def _referent(self) -> Optional[Any]:
        """The referent for resolution; None only for an empty selection."""
        if self._ref is None:
            return None
        obj = self._ref()
        if obj is None:
            raise FrameGraphError(
                f"{self._type.name.lower()} frame center was garbage collected"
            )
        return obj

    def _position(self, tdb: float, depth: int) -> UniversalCoord:
        obj = self._referent()
        if obj is None:
            return UniversalCoord.zero()
        return obj._position(tdb, depth)

    def _velocity(self, tdb: float, depth: int) -> np.ndarray:
        obj = self._referent()
        if obj is None:
            return np.zeros(3)
        return obj._velocity(tdb, depth)

    def get_frame_tree(self):
        obj = self.obj
        return obj.get_frame_tree() if obj is not None else None

    def get_or_create_frame_tree(self):
        obj = self.obj
        return obj.get_or_create_frame_tree() if obj is not None else None

    # =========================================================================
    # DUNDER METHODS
    # =========================================================================

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return self.obj is other.obj

    def __hash__(self) -> int:
        return id(self.obj)

    def __repr__(self) -> str:
        if self.is_empty():
            return "Selection(NONE)"
        return f"Selection({self._type.name}, '{self.get_name()}')"
