"""
Shared FastAPI dependencies: caller role resolution and permission gates.

The role travels explicitly with every request (ROLE_HEADER) and is passed
as a parameter into every predicate; nothing reads it from ambient state.
"""

from datetime import date
from typing import Optional

from fastapi import Depends, Header, HTTPException

from traincore.config import ROLE_HEADER
from traincore.services.gate import gate
from traincore.services.roles import Role, parse_role


def get_role(x_admin_role: Optional[str] = Header(None, alias=ROLE_HEADER)) -> Optional[Role]:
    """Caller's role, or None when absent or unrecognized."""
    return parse_role(x_admin_role)


def require(action: str):
    """
    Dependency factory enforcing a permission before the handler runs.

    A denied request never reaches the route body; it gets a 403 whose
    detail is the {allowed, reason} decision.
    """
    def _check(role: Optional[Role] = Depends(get_role)) -> Optional[Role]:
        decision = gate(action, role)
        if not decision.allowed:
            raise HTTPException(status_code=403, detail=decision.model_dump())
        return role
    return _check


def parse_day(value: Optional[str]) -> date:
    """ISO date from a request, today when absent; 400 when unparsable."""
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date: {}".format(value))


def get_identity_sync():
    """
    Callable mirroring role changes into the identity provider.

    None when no identity provider is wired in; deployments override this
    dependency.
    """
    return None
