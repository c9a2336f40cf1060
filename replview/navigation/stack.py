"""Navigation stack: breadcrumb state for one evaluated result.

The stack is an append/truncate list of frames. Frame 0 always holds the
original evaluated value; every later frame holds a value nested inside the
frame before it. Descending from an ancestor drops the previously explored
branch, there is no redo.

A stack belongs to exactly one result and is only touched by the session
that owns that result, so it carries no locking.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger(__name__)

BREADCRUMB_SEPARATOR = ";"


class NavigationError(IndexError):
    """Raised for an out-of-range ascend or an unreachable descend target."""


@dataclass(frozen=True)
class NavigationFrame:
    """One drill-down step: the breadcrumb label and the value reached."""

    label: str
    value: Any


class NavigationStack:
    """Drill-down path from a root value to the currently displayed value."""

    def __init__(self, root: Any):
        self._frames: list[NavigationFrame] = [NavigationFrame(label="", value=root)]

    @property
    def depth(self) -> int:
        """Number of frames, always at least 1."""
        return len(self._frames)

    @property
    def root(self) -> Any:
        return self._frames[0].value

    @property
    def current(self) -> Any:
        """The value currently on display."""
        return self._frames[-1].value

    @property
    def frames(self) -> tuple[NavigationFrame, ...]:
        return tuple(self._frames)

    def breadcrumbs(self) -> list[str]:
        """Labels of frames 1..depth-1. The root frame has no breadcrumb."""
        return [frame.label for frame in self._frames[1:]]

    def trail(self, separator: str = BREADCRUMB_SEPARATOR) -> str:
        """Breadcrumbs joined with each label followed by the separator.

        Three steps "a", "b", "c" give "a;b;c;". At the root the trail is empty.
        """
        return "".join(f"{label}{separator}" for label in self.breadcrumbs())

    def descend(self, label: Any, value: Any) -> None:
        """Push a frame for a value reached from the current one."""
        self._frames.append(NavigationFrame(label=str(label), value=value))
        logger.debug(f"Descended to '{label}' (depth {self.depth})")

    def descend_path(self, steps: Iterable[tuple[Any, Any]]) -> None:
        """Push one frame per (label, value) step, outermost first."""
        for label, value in steps:
            self.descend(label, value)

    def descend_into(self, key: Any) -> Any:
        """Descend to ``current[key]`` and return the value reached.

        Mapping keys are matched directly, then by their string form (keys
        arriving over HTTP are strings). Sequence keys are converted to int.

        Raises:
            NavigationError: If the current value has no such entry.
        """
        current = self.current
        if isinstance(current, Mapping):
            if key in current:
                self.descend(key, current[key])
                return self.current
            for candidate in current:
                if str(candidate) == str(key):
                    self.descend(candidate, current[candidate])
                    return self.current
            raise NavigationError(f"No key {key!r} in current value")

        if isinstance(current, Sequence) and not isinstance(current, (str, bytes, bytearray)):
            try:
                index = int(key)
                value = current[index]
            except (TypeError, ValueError, IndexError) as e:
                raise NavigationError(f"No index {key!r} in current value") from e
            self.descend(index, value)
            return self.current

        raise NavigationError(
            f"Cannot descend into a value of type {type(current).__name__}"
        )

    def ascend(self, to_index: int) -> Any:
        """Truncate the stack so frame ``to_index`` is current again.

        Raises:
            NavigationError: If ``to_index`` is not an existing frame index.
                The stack is left unchanged.
        """
        if not 0 <= to_index < self.depth:
            raise NavigationError(
                f"Cannot ascend to frame {to_index}, depth is {self.depth}"
            )
        del self._frames[to_index + 1:]
        logger.debug(f"Ascended to frame {to_index}")
        return self.current

    def reset(self, root: Any) -> None:
        """Start over with a single root frame holding ``root``."""
        self._frames = [NavigationFrame(label="", value=root)]
