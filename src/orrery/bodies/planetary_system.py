"""
===============================================================================
ORRERY - Planetary System
===============================================================================
A planetary system is the list of bodies orbiting one star or one primary
body, plus a case-insensitive name index covering every body's primary name,
aliases and localized primary name.

Index rules:
    - a real name or alias never gets displaced by a localized name
    - a real name displaces a localized entry of another body
    - two real names colliding keep the first entry (logged)

find() prefers real names: a hit on a localized name is ignored unless i18n
lookup was requested, and the search goes on into the satellite systems
when deep_search is set.
===============================================================================
"""

import logging
import weakref
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional

from orrery.core.config import get_settings
from orrery.core.exceptions import FrameGraphError, TimelineError
from orrery.frames.selection import SelectionType

logger = logging.getLogger(__name__)


class _IndexEntry(NamedTuple):
    name: str
    body: object
    localized: bool


def _key(name: str) -> str:
    return name.casefold()


class PlanetarySystem:
    """
    Bodies sharing a star or a primary body.

    Parameters
    ----------
    star : Star or Barycenter, optional
        Star of a top-level system.
    primary : Body, optional
        Body a satellite system belongs to. The star is inherited from the
        primary's own system.
    """

    def __init__(self, star=None, primary=None) -> None:
        if star is None and primary is not None and primary.system is not None:
            star = primary.system.star
        self._star_ref = weakref.ref(star) if star is not None else None
        self._primary_ref = weakref.ref(primary) if primary is not None else None
        self._satellites: List = []
        self._index: Dict[str, _IndexEntry] = {}

    @property
    def star(self):
        return self._star_ref() if self._star_ref is not None else None

    @property
    def primary(self):
        return self._primary_ref() if self._primary_ref is not None else None

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    def add_body(self, body) -> None:
        self._satellites.append(body)
        body._attach_to_system(self)
        self._add_body_to_index(body)

    def remove_body(self, body) -> None:
        for i, sat in enumerate(self._satellites):
            if sat is body:
                del self._satellites[i]
                break
        self._remove_body_from_index(body)
        if body.system is self:
            body._attach_to_system(None)

    def replace_body(self, old_body, new_body) -> None:
        """
        Put new_body in old_body's slot.

        Every index entry of old_body is removed before new_body's names
        are added.
        """
        for i, sat in enumerate(self._satellites):
            if sat is old_body:
                self._satellites[i] = new_body
                break
        self._remove_body_from_index(old_body)
        if old_body.system is self:
            old_body._attach_to_system(None)
        new_body._attach_to_system(self)
        self._add_body_to_index(new_body)
        logger.info("Replaced '%s' with '%s'", old_body.name, new_body.name)

    def get_body(self, index: int):
        return self._satellites[index]

    def get_order(self, body) -> int:
        """Position of body among the satellites; -1 if absent."""
        for i, sat in enumerate(self._satellites):
            if sat is body:
                return i
        return -1

    def __len__(self) -> int:
        return len(self._satellites)

    def __iter__(self) -> Iterator:
        return iter(list(self._satellites))

    # =========================================================================
    # NAME INDEX
    # =========================================================================

    def add_alias(self, body, alias: str) -> None:
        self._index_name(alias, body, localized=False)

    def remove_alias(self, body, alias: str) -> None:
        """Drop alias from the index, but only if it refers to body."""
        entry = self._index.get(_key(alias))
        if entry is not None and entry.body is body:
            del self._index[_key(alias)]

    def _index_name(self, name: str, body, localized: bool) -> None:
        key = _key(name)
        existing = self._index.get(key)
        if existing is None or (existing.localized and not localized):
            self._index[key] = _IndexEntry(name, body, localized)
        elif existing.body is not body and not localized:
            logger.warning("Name '%s' of '%s' already refers to '%s'; keeping the first",
                           name, body.name, existing.body.name)

    def _add_body_to_index(self, body) -> None:
        for name in body.names:
            self._index_name(name, body, localized=False)
        if body.has_localized_name():
            self._index_name(body.localized_name, body, localized=True)

    def _remove_body_from_index(self, body) -> None:
        for name in body.names:
            self.remove_alias(body, name)
        if body.has_localized_name():
            self.remove_alias(body, body.localized_name)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def find(self, name: str, deep_search: bool = False, i18n: bool = False):
        """
        Find a body by name.

        Parameters
        ----------
        name : str
            Name or alias, compared case-insensitively.
        deep_search : bool
            Also search the satellite systems of every body, recursively.
        i18n : bool
            Accept localized names. Leave False when resolving names from
            data files so lookups do not depend on the locale.

        Returns
        -------
        Body or None
        """
        key = _key(name)
        entry = self._index.get(key)
        if entry is not None:
            body = entry.body
            if i18n:
                return body
            if not body.has_localized_name() or key != _key(body.localized_name):
                return body

        if deep_search:
            for sat in self._satellites:
                if _key(sat.get_name(False)) == key:
                    return sat
                if i18n and _key(sat.get_name(True)) == key:
                    return sat
                if sat.satellites is not None:
                    found = sat.satellites.find(name, deep_search, i18n)
                    if found is not None:
                        return found
        return None

    def traverse(self, func: Callable[[object], bool]) -> bool:
        """
        Depth-first visit of every body and its satellites.

        Stops as soon as func returns False and reports False.
        """
        for body in list(self._satellites):
            if not func(body):
                return False
            if body.satellites is not None and not body.satellites.traverse(func):
                return False
        return True

    def get_completion(self, prefix: str, i18n: bool = True,
                       deep_search: bool = True) -> List[str]:
        """Names (and localized names when i18n) starting with prefix."""
        p = _key(prefix)
        completion = [entry.name for _, entry in sorted(self._index.items())
                      if (i18n or not entry.localized) and _key(entry.name).startswith(p)]

        if deep_search:
            for sat in self._satellites:
                if sat.satellites is not None:
                    completion.extend(sat.satellites.get_completion(prefix, i18n, deep_search))
        return completion

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self) -> int:
        """
        Check every body reachable from this system.

        Each body needs a timeline; following orbit-frame centers from any
        phase must end at a star or barycenter without revisiting a body or
        exceeding settings.max_frame_depth; body frames must not follow
        their own body, directly or through other bodies.

        Returns
        -------
        int
            Number of bodies checked.

        Raises
        ------
        TimelineError
            If a body has no timeline.
        FrameGraphError
            If a frame-center or orientation chain is cyclic, too deep or
            ends at an empty center.
        """
        bodies = []
        self.traverse(lambda b: bodies.append(b) or True)

        for body in bodies:
            if body.timeline is None:
                logger.error("Body '%s' has no timeline", body.name)
                raise TimelineError(f"Body '{body.name}' has no timeline")
            self._check_chain(body, lambda b: [p.orbit_frame for p in b.timeline], "orbit")
            self._check_chain(body, lambda b: [p.body_frame for p in b.timeline], "body")

        logger.info("Validated %d bodies", len(bodies))
        return len(bodies)

    @staticmethod
    def _check_chain(start, frames_of, role: str) -> None:
        """
        Depth-first search over the bodies reached through frames_of(body).

        For orbit frames the next body is the frame center; for body frames
        it is the object the frame follows.
        """
        limit = get_settings().max_frame_depth

        def next_selection(frame):
            return frame.center if role == "orbit" else frame.followed_object()

        def visit(body, path):
            if len(path) > limit:
                raise FrameGraphError(
                    f"{role} frame chain of '{start.name}' deeper than {limit}",
                    chain=[b.name for b in path],
                )
            if body.timeline is None:
                raise TimelineError(f"Body '{body.name}' has no timeline")

            for frame in frames_of(body):
                sel = next_selection(frame)
                sel_type = sel.type
                if sel_type is SelectionType.NONE:
                    if role == "orbit":
                        raise FrameGraphError(
                            f"Orbit frame of '{body.name}' has no center",
                            chain=[b.name for b in path],
                        )
                    continue
                if sel_type is not SelectionType.BODY:
                    _check_stellar_chain(sel.obj, limit)
                    continue

                nxt = sel.body
                if any(nxt is b for b in path):
                    chain = [b.name for b in path] + [nxt.name]
                    logger.error("Cyclic %s frame chain: %s", role, " -> ".join(chain))
                    raise FrameGraphError(f"Cyclic {role} frame chain: {' -> '.join(chain)}",
                                          chain=chain)
                visit(nxt, path + [nxt])

        visit(start, [start])


def _check_stellar_chain(obj, limit: int) -> None:
    seen = []
    while obj is not None:
        if any(obj is s for s in seen) or len(seen) > limit:
            chain = [s.name for s in seen] + [obj.name]
            raise FrameGraphError(f"Cyclic barycenter chain: {' -> '.join(chain)}", chain=chain)
        seen.append(obj)
        obj = obj.orbit_barycenter
