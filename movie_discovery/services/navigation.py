"""Top-level view state: which screen is shown and for which movie."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable


logger = logging.getLogger(__name__)


class View(str, enum.Enum):
    CATALOG = "catalog"
    DETAIL = "detail"
    FAVORITES = "favorites"


@dataclass(frozen=True, slots=True)
class NavigationState:
    view: View = View.CATALOG
    movie_id: int | None = None


TransitionListener = Callable[[NavigationState, NavigationState], None]


class NavigationController:
    """Routes user actions to view transitions.

    There is no history: ``go_home`` always lands on the catalog. Listeners
    are called synchronously with ``(previous, current)`` after each
    transition, which is where detail fetches get started.
    """

    def __init__(self, listeners: list[TransitionListener] | None = None) -> None:
        self.state = NavigationState()
        self._listeners: list[TransitionListener] = list(listeners or [])

    def select_movie(self, movie_id: int) -> NavigationState:
        return self._transition(NavigationState(View.DETAIL, movie_id))

    def go_home(self) -> NavigationState:
        return self._transition(NavigationState(View.CATALOG))

    def go_to_favorites(self) -> NavigationState:
        return self._transition(NavigationState(View.FAVORITES))

    def _transition(self, new_state: NavigationState) -> NavigationState:
        previous = self.state
        self.state = new_state
        logger.debug("Navigation %s -> %s", previous, new_state)
        for listener in self._listeners:
            listener(previous, new_state)
        return new_state
