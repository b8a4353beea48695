"""Error hierarchy for frame and timeline resolution."""


class OrreryError(Exception):
    """Base class for all errors raised by the orrery package."""


class TimelineError(OrreryError, ValueError):
    """A timeline is malformed (empty, unsorted, gapped) or missing."""


class FrameGraphError(OrreryError):
    """The orbit-frame center graph is cyclic or deeper than allowed.

    Attributes
    ----------
    chain : list of str
        Names of the objects visited before the walk was abandoned.
    """

    def __init__(self, message: str, chain=None) -> None:
        super().__init__(message)
        self.chain = list(chain) if chain is not None else []


class ConfigError(OrreryError, ValueError):
    """A settings file is unreadable or contains unknown keys."""
