"""
Role management - changing a staff member's role.

A role change touches two stores: the admins table and the identity
provider's user metadata. They do not share a transaction. If the admins
row commits and the identity sync fails, the admins row stays changed and
PartialUpdateError tells the caller exactly which side failed.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session

from traincore.errors import PartialUpdateError
from traincore.logging_config import get_logger, log_with_context
from traincore.models.admin import AdminProfile
from traincore.services.roles import Role, parse_role

logger = get_logger("auth")

# Roles that can be granted through the console; super_admin is provisioned
# out of band.
ASSIGNABLE_ROLES = frozenset({Role.ADMIN, Role.VIEWER})

IdentitySync = Callable[[str, str], None]


def update_user_role(db: Session, admin: AdminProfile, new_role: str,
                     identity_sync: Optional[IdentitySync] = None) -> AdminProfile:
    """
    Set `admin.role` to `new_role` and mirror it to the identity store.

    Raises:
        ValueError: new_role is not admin or viewer.
        PartialUpdateError: the admins row committed but identity_sync
            raised.
    """
    role = parse_role(new_role)
    if role not in ASSIGNABLE_ROLES:
        raise ValueError("Role must be one of: admin, viewer")

    previous = admin.role
    admin.role = role.value
    admin.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(admin)

    log_with_context(logger, "INFO",
        "Role changed {} -> {}".format(previous, role.value),
        context={"user_id": admin.user_id})

    if identity_sync is not None:
        try:
            identity_sync(admin.user_id, role.value)
        except Exception as e:
            log_with_context(logger, "ERROR",
                "Identity store sync failed after role change: {}".format(e),
                context={"user_id": admin.user_id})
            raise PartialUpdateError(
                "Role saved but identity store sync failed: {}".format(e),
                committed="admins", failed="identity",
            ) from e
    return admin
