"""Authenticated session and role permissions.

A Session is created empty, initialised by ``login`` once the backend has
issued a token, and cleared by ``logout``. Callers pass the session to
whatever needs it instead of reading a global token store.
"""

import logging
from dataclasses import dataclass, fields
from typing import Dict, FrozenSet, Optional

from taskview.errors import SessionError
from taskview.models import User

logger = logging.getLogger(__name__)

ADMIN = "admin"
USER = "user"

_EVERYONE = frozenset({USER, ADMIN})
_ADMINS = frozenset({ADMIN})


@dataclass(frozen=True)
class Permissions:
    can_view_dashboard: bool = False
    can_view_projects: bool = False
    can_create_project: bool = False
    can_update_project: bool = False
    can_delete_project: bool = False
    can_view_pages: bool = False
    can_create_page: bool = False
    can_update_page_status: bool = False
    can_approve_page: bool = False
    can_unlock_page: bool = False
    can_delete_page: bool = False
    can_view_tickets: bool = False
    can_create_ticket: bool = False
    can_resolve_ticket: bool = False
    can_view_team: bool = False
    can_manage_users: bool = False
    can_manage_settings: bool = False
    can_access_admin_panel: bool = False


# Roles granted each permission.
GRANTS: Dict[str, FrozenSet[str]] = {
    "can_view_dashboard": _EVERYONE,
    "can_view_projects": _EVERYONE,
    "can_create_project": _EVERYONE,
    "can_update_project": _ADMINS,
    "can_delete_project": _EVERYONE,
    "can_view_pages": _EVERYONE,
    "can_create_page": _EVERYONE,
    "can_update_page_status": _EVERYONE,
    "can_approve_page": _ADMINS,
    "can_unlock_page": _ADMINS,
    "can_delete_page": _EVERYONE,
    "can_view_tickets": _EVERYONE,
    "can_create_ticket": _EVERYONE,
    "can_resolve_ticket": _EVERYONE,
    "can_view_team": _ADMINS,
    "can_manage_users": _ADMINS,
    "can_manage_settings": _ADMINS,
    "can_access_admin_panel": _ADMINS,
}


def permissions_for(role: Optional[str]) -> Permissions:
    """Return the permission flags for a role; no role grants nothing."""
    if not role:
        return Permissions()
    return Permissions(**{f.name: role in GRANTS[f.name] for f in fields(Permissions)})


class Session:
    """Bearer token and profile of the signed-in user.

    Attributes:
        token: Bearer token, None when signed out
        profile: Signed-in user, None when signed out
    """

    def __init__(self):
        self.token: Optional[str] = None
        self.profile: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile is not None else None

    @property
    def permissions(self) -> Permissions:
        return permissions_for(self.role)

    def login(self, token: str, user: User) -> None:
        """Start the session.

        Args:
            token: Bearer token issued by the backend
            user: Profile of the user the token belongs to

        Raises:
            SessionError: If already signed in or the token is empty
        """
        if self.is_authenticated:
            raise SessionError("Session already has a signed-in user; log out first")
        if not token:
            raise SessionError("Cannot start a session with an empty token")
        self.token = token
        self.profile = user
        logger.info("Signed in as %s (%s)", user.email or user.id, user.role)

    def logout(self) -> None:
        if self.profile is not None:
            logger.info("Signed out %s", self.profile.email or self.profile.id)
        self.token = None
        self.profile = None

    def auth_headers(self) -> Dict[str, str]:
        """HTTP headers carrying the bearer token, empty when signed out."""
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
