# timesheets/identity.py
"""Who is acting, and what they may do."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from django.core.exceptions import PermissionDenied

from core.utils.authz import TIMESHEETS_MANAGER, user_roles


@dataclass(frozen=True)
class Actor:
    id: int                      # Person pk
    name: str = ""
    email: str = ""
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_timesheets_manager(self) -> bool:
        return self.has_role(TIMESHEETS_MANAGER)


def actor_for_user(user) -> Actor:
    """Actor for a logged-in Django user; the user must be linked to a Person."""
    person = getattr(user, "person", None) if user is not None else None
    if person is None:
        raise PermissionDenied("Your account is not linked to a person record.")
    return Actor(
        id=person.pk,
        name=person.display_name,
        email=person.email or getattr(user, "email", ""),
        roles=frozenset(user_roles(user)),
    )


def person_actor(person, roles: Optional[set[str]] = None) -> Actor:
    """Actor for a Person row directly (admin actions, commands)."""
    return Actor(id=person.pk, name=person.display_name, email=person.email, roles=frozenset(roles or ()))
