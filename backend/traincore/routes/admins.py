"""
Staff API routes - role management and permission discovery.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from traincore.database import get_db, to_row
from traincore.errors import PartialUpdateError
from traincore.models.admin import AdminProfile
from traincore.routes.deps import get_identity_sync, get_role, require
from traincore.services.admin_roles import update_user_role
from traincore.services.gate import permission_map
from traincore.services.roles import Role, role_display_name
from traincore.services.stats import admin_stats

router = APIRouter()


class RoleUpdate(BaseModel):
    role: str


@router.get("/api/permissions")
def get_permissions(role: Optional[Role] = Depends(get_role)):
    """
    The caller's decision for every action in the permission matrix.

    The console renders each control enabled or disabled, with the reason
    as its tooltip, from this map.
    """
    return {
        "role": role.value if role else None,
        "role_display_name": role_display_name(role),
        "permissions": {action: d.model_dump() for action, d in permission_map(role).items()},
    }


@router.get("/api/admins/stats")
def get_admin_stats(db: Session = Depends(get_db), role=Depends(require("view_students"))):
    """Staff counts by role."""
    return admin_stats([to_row(a) for a in db.query(AdminProfile).all()])


@router.put("/api/admins/{user_id}/role")
def update_role(
    user_id: str,
    update: RoleUpdate,
    db: Session = Depends(get_db),
    identity_sync=Depends(get_identity_sync),
    role=Depends(require("manage_roles"))
):
    """
    Change a staff member's role to admin or viewer.

    If the identity store cannot be updated after the admins row has been
    saved, the request fails with 502 and says which store is out of step.
    """
    admin = db.query(AdminProfile).filter(AdminProfile.user_id == user_id).first()
    if not admin:
        raise HTTPException(status_code=404, detail="Admin user not found")

    try:
        admin = update_user_role(db, admin, update.role, identity_sync=identity_sync)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PartialUpdateError as e:
        raise HTTPException(status_code=502, detail={
            "message": str(e),
            "committed": e.committed,
            "failed": e.failed,
        })

    return to_row(admin)
