"""
Per-page access guard.

A guard starts in LOADING while the visitor's identity is being resolved and
settles exactly once into AUTHORIZED or one of the two redirect states. The
transition itself is the pure function `resolve`; `AccessGuard` adds the
per-mount bookkeeping: it remembers whether the page is still mounted and
only fires the navigation callback for a live mount.

The guard only decides what a visitor gets to *see*. Endpoints called by a
page must check roles again on the server.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Optional
from urllib.parse import urlencode

from rental_manager.utils.constants import LOGIN_PATH, UNAUTHORIZED_PATH, Role


class GuardState(str, Enum):
    LOADING = "loading"
    AUTHORIZED = "authorized"
    REDIRECTING_UNAUTHENTICATED = "redirecting_unauthenticated"
    REDIRECTING_UNAUTHORIZED = "redirecting_unauthorized"


TERMINAL_STATES = frozenset({
    GuardState.AUTHORIZED,
    GuardState.REDIRECTING_UNAUTHENTICATED,
    GuardState.REDIRECTING_UNAUTHORIZED,
})


def resolve(identity, allowed_roles: Iterable[Role]) -> GuardState:
    """Map a settled identity (or None) against an allow-list to a terminal state."""
    if identity is None:
        return GuardState.REDIRECTING_UNAUTHENTICATED
    if Role.parse(getattr(identity, "role", None)) in set(allowed_roles):
        return GuardState.AUTHORIZED
    return GuardState.REDIRECTING_UNAUTHORIZED


def login_location(next_path: Optional[str] = None) -> str:
    if not next_path:
        return LOGIN_PATH
    return f"{LOGIN_PATH}?{urlencode({'redirect': next_path})}"


class AccessGuard:
    """
    One guard per page mount.

    `navigate` receives the target location when the guard settles into a
    redirect state while still mounted.
    """

    def __init__(self, allowed_roles: Iterable[Role], navigate: Callable[[str], None],
                 path: Optional[str] = None):
        self.allowed_roles = frozenset(allowed_roles)
        self.navigate = navigate
        self.path = path
        self.state = GuardState.LOADING
        self.mounted = True
        self.location: Optional[str] = None

    @property
    def settled(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def authorized(self) -> bool:
        return self.state is GuardState.AUTHORIZED

    def unmount(self) -> None:
        self.mounted = False

    def settle(self, identity) -> GuardState:
        """
        Apply the resolved identity. Ignored once settled or after unmount;
        in both cases the current state is returned unchanged.
        """
        if self.settled or not self.mounted:
            return self.state

        self.state = resolve(identity, self.allowed_roles)
        if self.state is GuardState.REDIRECTING_UNAUTHENTICATED:
            self.location = login_location(self.path)
        elif self.state is GuardState.REDIRECTING_UNAUTHORIZED:
            self.location = UNAUTHORIZED_PATH

        if self.location is not None:
            self.navigate(self.location)
        return self.state
