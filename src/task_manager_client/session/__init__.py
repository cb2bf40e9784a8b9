"""Session persistence and the routing guard built on it."""

from .gate import GateDecision, GateState, SessionGate, View, resolve
from .store import SessionStore, origin_of

__all__ = [
    "GateDecision",
    "GateState",
    "SessionGate",
    "SessionStore",
    "View",
    "origin_of",
    "resolve",
]
