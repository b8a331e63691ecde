"""
Role Predicate Set - pure role -> permission functions.

Three role tags exist: super_admin, admin, viewer. Every predicate takes
the caller's role explicitly and returns a bool. Predicates never raise and
never read session state; an absent or unrecognized role resolves to None
and every predicate then returns False.

Permission matrix:

    action                     super_admin  admin  viewer  none
    manage_students                 Y         Y      -      -
    mark_student_attendance         Y         Y      -      -
    edit                            Y         Y      -      -
    manage_tasks / access_tasks     Y         Y      -      -
    lock_task_deadline              Y         -      -      -
    manage_teachers                 Y         -      -      -
    mark_teacher_attendance         Y         -      -      -
    manage_roles                    Y         -      -      -
    view_students                   Y         Y      Y      -
    view_teacher_attendance         Y         Y      Y      -
"""

from enum import Enum
from typing import Callable, Dict, Optional, Union


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    VIEWER = "viewer"


RoleInput = Union[Role, str, None]

STAFF_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

ROLE_DISPLAY_NAMES = {
    Role.SUPER_ADMIN: "Super Admin",
    Role.ADMIN: "Admin",
    Role.VIEWER: "Viewer",
}


def parse_role(value: RoleInput) -> Optional[Role]:
    """Resolve a raw role tag; anything unrecognized means no role."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def role_display_name(value: RoleInput) -> str:
    role = parse_role(value)
    return ROLE_DISPLAY_NAMES.get(role, "Unknown")


def is_authenticated(value: RoleInput) -> bool:
    return parse_role(value) is not None


def is_super_admin(value: RoleInput) -> bool:
    return parse_role(value) is Role.SUPER_ADMIN


def is_staff(value: RoleInput) -> bool:
    return parse_role(value) in STAFF_ROLES


# ── Student domain ───────────────────────────────────────────

def can_manage_students(role: RoleInput) -> bool:
    return is_staff(role)


def can_mark_student_attendance(role: RoleInput) -> bool:
    return is_staff(role)


def can_view_students(role: RoleInput) -> bool:
    return is_authenticated(role)


def can_edit(role: RoleInput) -> bool:
    """Any edit permission at all (i.e. not a viewer)."""
    return is_staff(role)


# ── Teacher domain ───────────────────────────────────────────

def can_manage_teachers(role: RoleInput) -> bool:
    return is_super_admin(role)


def can_mark_teacher_attendance(role: RoleInput) -> bool:
    return is_super_admin(role)


def can_view_teacher_attendance(role: RoleInput) -> bool:
    return is_authenticated(role)


# ── Tasks and settings ───────────────────────────────────────

def can_manage_tasks(role: RoleInput) -> bool:
    return is_staff(role)


def can_access_tasks(role: RoleInput) -> bool:
    return is_staff(role)


def can_lock_task_deadline(role: RoleInput) -> bool:
    """Set or clear a task deadline lock, and move a locked deadline."""
    return is_super_admin(role)


def can_manage_roles(role: RoleInput) -> bool:
    return is_super_admin(role)


def is_viewer_only(role: RoleInput) -> bool:
    return parse_role(role) is Role.VIEWER


# Action name -> predicate
PERMISSIONS: Dict[str, Callable[[RoleInput], bool]] = {
    "manage_students": can_manage_students,
    "mark_student_attendance": can_mark_student_attendance,
    "view_students": can_view_students,
    "edit": can_edit,
    "manage_teachers": can_manage_teachers,
    "mark_teacher_attendance": can_mark_teacher_attendance,
    "view_teacher_attendance": can_view_teacher_attendance,
    "manage_tasks": can_manage_tasks,
    "access_tasks": can_access_tasks,
    "lock_task_deadline": can_lock_task_deadline,
    "manage_roles": can_manage_roles,
}

# Action name -> who may perform it, for denial messages
REQUIRED_ROLE_LABELS = {
    "manage_students": "admins",
    "mark_student_attendance": "admins",
    "view_students": "signed-in staff",
    "edit": "admins",
    "manage_teachers": "super admins",
    "mark_teacher_attendance": "super admins",
    "view_teacher_attendance": "signed-in staff",
    "manage_tasks": "admins",
    "access_tasks": "admins",
    "lock_task_deadline": "super admins",
    "manage_roles": "super admins",
}
