"""Actor identity from request headers.

Sessions are issued by an external auth layer which forwards the acting
user on each request:

- X-Actor-ID: opaque user id (required for every write)
- X-Actor-Role: "admin" for the administrative routes

Missing identity is 401; a non-admin role on an admin route is 403.
"""

from typing import Annotated

import structlog
from fastapi import Header, HTTPException, status

logger = structlog.get_logger(__name__)

ADMIN_ROLE = "admin"


def get_actor_id(
    x_actor_id: Annotated[
        str | None,
        Header(description="Acting user id issued by the auth layer."),
    ] = None,
) -> str:
    """Return the acting user id.

    Raises:
        HTTPException 401: If X-Actor-ID is missing or blank.
    """
    actor_id = (x_actor_id or "").strip()
    if not actor_id:
        logger.bind(component="actor_auth").warning("auth_failed", reason="missing_actor_id")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-ID header is required",
        )
    return actor_id


def get_admin_actor_id(
    x_actor_id: Annotated[
        str | None,
        Header(description="Acting user id issued by the auth layer."),
    ] = None,
    x_actor_role: Annotated[
        str | None,
        Header(description="Role of the acting user. Must be 'admin'."),
    ] = None,
) -> str:
    """Return the acting admin id.

    Raises:
        HTTPException 401: If X-Actor-ID is missing.
        HTTPException 403: If X-Actor-Role is not admin.
    """
    actor_id = get_actor_id(x_actor_id)
    if (x_actor_role or "").strip().lower() != ADMIN_ROLE:
        logger.bind(component="actor_auth").warning(
            "authz_failed",
            reason="insufficient_role",
            actor_id=actor_id,
            provided_role=x_actor_role,
            required_role=ADMIN_ROLE,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Admin role required. Provided role: {x_actor_role}",
        )
    return actor_id
