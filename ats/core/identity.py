"""Authenticated actor attached to each request."""

from dataclasses import dataclass

from fastapi import Header

from ats.core.exceptions import unauthorized_exception
from ats.models.status import Role


@dataclass(frozen=True)
class Actor:
    """Identity resolved by the authenticating gateway."""

    id: int
    role: Role

    @property
    def is_hiring(self) -> bool:
        return self.role in (Role.HIRING_MANAGER, Role.SUPER_ADMIN)


def get_current_actor(
    x_actor_id: int | None = Header(default=None),
    x_actor_role: Role | None = Header(default=None),
) -> Actor:
    """Read the actor from the headers set upstream.

    Credentials are never checked here; requests without a resolved
    identity are rejected.
    """
    if x_actor_id is None or x_actor_role is None:
        raise unauthorized_exception("Actor identity missing")
    return Actor(id=x_actor_id, role=x_actor_role)
