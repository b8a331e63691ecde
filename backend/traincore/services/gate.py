"""
Authorization Gate - wraps actions with a permission decision.

A denial is a value, not an exception: every check resolves to a
Decision(allowed, reason) the presentation layer can render as a disabled
control with a tooltip. GatedAction enforces the same decision at the point
of invocation, so a denied handler is unreachable even if a caller skips
the rendering step.
"""

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from traincore.logging_config import get_logger, log_with_context
from traincore.services.roles import PERMISSIONS, REQUIRED_ROLE_LABELS, RoleInput, parse_role

logger = get_logger("auth")

DEFAULT_DENIAL = "You don't have permission for this action"


class Decision(BaseModel):
    """Output shape {allowed, reason}; reason is None when allowed."""
    allowed: bool
    reason: Optional[str] = None


def permission_message(action: str, required_role: str) -> str:
    """Tooltip text for a disabled action, e.g. 'Only admins can mark attendance'."""
    return "Only {} can {}".format(required_role, action.replace("_", " "))


def authorize(permission: bool, message: Optional[str] = None) -> Decision:
    """Turn a predicate result into a Decision."""
    if permission is True:
        return Decision(allowed=True)
    return Decision(allowed=False, reason=message or DEFAULT_DENIAL)


def gate(action: str, role: RoleInput, message: Optional[str] = None) -> Decision:
    """
    Evaluate a named action from the permission matrix for a role.

    Unknown actions deny. The default denial reason names the roles that
    may perform the action.
    """
    predicate = PERMISSIONS.get(action)
    if predicate is None:
        log_with_context(logger, "WARNING", "Unknown action '{}' denied".format(action),
            context={"action": action})
        return Decision(allowed=False, reason=message or DEFAULT_DENIAL)

    if message is None and action in REQUIRED_ROLE_LABELS:
        message = permission_message(action, REQUIRED_ROLE_LABELS[action])
    decision = authorize(predicate(role), message)

    if not decision.allowed:
        resolved = parse_role(role)
        log_with_context(logger, "INFO", "Denied '{}'".format(action),
            context={"action": action, "role": resolved.value if resolved else None})
    return decision


def permission_map(role: RoleInput) -> Dict[str, Decision]:
    """Every action in the matrix evaluated for one role."""
    return {action: gate(action, role) for action in PERMISSIONS}


class GatedAction:
    """
    A handler bound to a Decision.

    invoke() runs the handler only when the decision allows it; otherwise
    the handler is never called and the Decision is returned in its place.
    """

    def __init__(self, handler: Callable[..., Any], decision: Decision):
        self._handler = handler
        self.decision = decision

    @property
    def enabled(self) -> bool:
        return self.decision.allowed

    @property
    def reason(self) -> Optional[str]:
        return self.decision.reason

    def invoke(self, *args, **kwargs):
        if not self.decision.allowed:
            return self.decision
        return self._handler(*args, **kwargs)

    __call__ = invoke


def gated(action: str, role: RoleInput, handler: Callable[..., Any],
          message: Optional[str] = None) -> GatedAction:
    """Bind a handler to the decision for (action, role)."""
    return GatedAction(handler, gate(action, role, message))
