"""Routing guard deciding which view a navigation attempt resolves to.

The gate has two states, driven only by whether the session holds a token:

- UNAUTHENTICATED: protected views redirect to the login view.
- AUTHENTICATED: the login and register views redirect to the task list.

``resolve`` is a pure function of (path, session) so it can be re-evaluated
on every navigation without caring how navigation is physically performed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..models import Session

if TYPE_CHECKING:
    from .store import SessionStore

logger = logging.getLogger(__name__)


class View(str, Enum):
    """Routable views, identified by path."""

    ENTRY = "/"
    LOGIN = "/login"
    REGISTER = "/register"
    TASKS = "/tasks"


class GateState(Enum):
    """Authentication state as seen by the gate."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


PUBLIC_VIEWS = frozenset({View.LOGIN, View.REGISTER})
PROTECTED_VIEWS = frozenset({View.TASKS})


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a navigation attempt.

    Attributes:
        requested: Path the caller asked for.
        view: View the navigation resolves to.
        state: Authentication state the decision was based on.
    """

    requested: str
    view: View
    state: GateState

    @property
    def redirected(self) -> bool:
        return self.requested != self.view.value


def state_for(session: Session) -> GateState:
    """Map a session to its gate state."""
    if session.is_authenticated:
        return GateState.AUTHENTICATED
    return GateState.UNAUTHENTICATED


def resolve(path: str, session: Session) -> GateDecision:
    """Resolve ``path`` to the view that should be rendered.

    Unknown paths are treated like the entry view.
    """
    state = state_for(session)
    try:
        requested_view = View(path)
    except ValueError:
        requested_view = View.ENTRY

    if requested_view is View.ENTRY:
        view = View.TASKS if state is GateState.AUTHENTICATED else View.LOGIN
    elif requested_view in PROTECTED_VIEWS and state is GateState.UNAUTHENTICATED:
        view = View.LOGIN
    elif requested_view in PUBLIC_VIEWS and state is GateState.AUTHENTICATED:
        view = View.TASKS
    else:
        view = requested_view

    return GateDecision(requested=path, view=view, state=state)


class SessionGate:
    """Evaluates navigation attempts against the current Session Store."""

    def __init__(self, store: SessionStore) -> None:
        self._store = store

    async def evaluate(self, path: str) -> GateDecision:
        """Load the session and resolve ``path``."""
        session = await self._store.load()
        decision = resolve(path, session)
        if decision.redirected:
            logger.debug(
                "Gate redirect %s -> %s (%s)",
                path,
                decision.view.value,
                decision.state.value,
            )
        return decision
