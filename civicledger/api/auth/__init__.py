"""Request identity taken from headers set by the external auth layer."""

from civicledger.api.auth.actor_auth import (
    ADMIN_ROLE,
    get_actor_id,
    get_admin_actor_id,
)

__all__: list[str] = [
    "ADMIN_ROLE",
    "get_actor_id",
    "get_admin_actor_id",
]
