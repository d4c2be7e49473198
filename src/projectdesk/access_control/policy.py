"""
Authorization policy for project resourcing.

A single ``authorize(actor, resource, action)`` entry point evaluates JSONLogic
policies against the actor and resource attributes. Deny overrides allow; no
matching allow means deny.

The evaluation context looks like:
    {
        "user": {"id", "role", "organization_id", "is_super_admin", "is_active"},
        "resource": {...resource attributes...},
        "action": "allocation.write",
    }
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from json_logic import jsonLogic

from projectdesk.errors import ForbiddenError

logger = logging.getLogger(__name__)

# --- Reusable conditions ---

IS_SUPER_ADMIN = {
    "and": [
        {"==": [{"var": "user.role"}, "admin"]},
        {"==": [{"var": "user.is_super_admin"}, True]},
    ]
}

# Guard against two org-less records comparing equal
SAME_ORGANIZATION = {
    "and": [
        {"!!": [{"var": "user.organization_id"}]},
        {"==": [{"var": "resource.organization_id"}, {"var": "user.organization_id"}]},
    ]
}

IS_PROJECT_OWNER = {"==": [{"var": "resource.owner_id"}, {"var": "user.id"}]}

IS_PROJECT_MEMBER = {"in": [{"var": "user.id"}, {"var": "resource.member_ids"}]}

IS_MANAGER = {"in": [{"var": "user.role"}, ["admin", "pm"]]}


@dataclass(frozen=True)
class Policy:
    name: str
    resource: str
    action: str
    condition: Dict[str, Any]
    effect: str = "allow"
    priority: int = 0


@dataclass(frozen=True)
class Resource:
    """A protected resource: its type and the attributes policies may inspect."""
    type: str
    attributes: Dict[str, Any] = field(default_factory=dict)


DEFAULT_POLICIES: List[Policy] = [
    Policy(
        name="deny-inactive-users",
        resource="*",
        action="*",
        condition={"!": [{"var": "user.is_active"}]},
        effect="deny",
        priority=100,
    ),
    Policy(
        name="read-project-allocations",
        resource="project",
        action="allocation.read",
        condition={"or": [IS_SUPER_ADMIN, IS_PROJECT_OWNER, SAME_ORGANIZATION, IS_PROJECT_MEMBER]},
    ),
    Policy(
        name="write-project-allocations",
        resource="project",
        action="allocation.write",
        condition={
            "or": [
                IS_SUPER_ADMIN,
                IS_PROJECT_OWNER,
                {"and": [IS_MANAGER, SAME_ORGANIZATION]},
            ]
        },
    ),
    Policy(
        name="read-user-capacity",
        resource="user",
        action="capacity.read",
        condition={"or": [IS_SUPER_ADMIN, SAME_ORGANIZATION]},
    ),
    Policy(
        name="write-user-capacity",
        resource="user",
        action="capacity.write",
        condition={"or": [IS_SUPER_ADMIN, {"and": [IS_MANAGER, SAME_ORGANIZATION]}]},
    ),
]


def project_resource(project, member_ids: Optional[List[str]] = None) -> Resource:
    return Resource(
        type="project",
        attributes={
            "id": project.id,
            "organization_id": project.organization_id,
            "owner_id": project.owner_id,
            "member_ids": list(member_ids or []),
        },
    )


def user_resource(user) -> Resource:
    return Resource(
        type="user",
        attributes={"id": user.id, "organization_id": user.organization_id},
    )


class AccessPolicy:
    """
    Attribute-based access control over a fixed policy set.
    """

    def __init__(self, policies: Optional[List[Policy]] = None):
        self.policies = list(DEFAULT_POLICIES if policies is None else policies)

    def build_context(self, actor, resource: Resource, action: str) -> Dict[str, Any]:
        return {
            "user": {
                "id": actor.id,
                "role": actor.role,
                "organization_id": actor.organization_id,
                "is_super_admin": bool(actor.is_super_admin),
                "is_active": bool(actor.is_active),
            },
            "resource": dict(resource.attributes),
            "action": action,
        }

    def evaluate_policy(self, policy: Policy, context: Dict[str, Any]) -> bool:
        """
        Evaluate a single policy's condition against the context.
        A condition that fails to evaluate does not match.
        """
        try:
            return bool(jsonLogic(policy.condition, context))
        except Exception:
            logger.warning("Policy %s failed to evaluate", policy.name, exc_info=True)
            return False

    def check_access(self, actor, resource: Resource, action: str) -> bool:
        """
        1. Filter policies matching resource type & action.
        2. Sort by priority (descending).
        3. A matching deny returns False immediately.
        4. Otherwise True if at least one allow matched.
        """
        context = self.build_context(actor, resource, action)

        relevant = [
            p for p in self.policies
            if (p.resource == resource.type or p.resource == "*")
            and (p.action == action or p.action == "*")
        ]
        relevant.sort(key=lambda p: p.priority, reverse=True)

        allowed = False
        for policy in relevant:
            if self.evaluate_policy(policy, context):
                if policy.effect == "deny":
                    return False
                if policy.effect == "allow":
                    allowed = True
        return allowed

    def authorize(self, actor, resource: Resource, action: str, message: Optional[str] = None) -> None:
        """Raise ForbiddenError unless ``actor`` may perform ``action`` on ``resource``."""
        if not self.check_access(actor, resource, action):
            logger.info(
                "Access denied: user=%s action=%s resource=%s:%s",
                actor.id, action, resource.type, resource.attributes.get("id"),
            )
            raise ForbiddenError(message or f"Not allowed to perform {action}")
