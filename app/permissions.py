"""
Authorization rules shared by every handler.

A `Rule` is a predicate over the requester and, for owned resources, the
owner's email. Rules compose with `&` and `|`; `check` raises `Forbidden`
with the rule's message when the predicate fails.
"""
from dataclasses import dataclass
from typing import Callable, Optional
from app.domain.user.models import User, Role
from app.exceptions import Forbidden
import logging

logger = logging.getLogger(__name__)

Predicate = Callable[[User, Optional[str]], bool]


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def same_identity(first: Optional[str], second: Optional[str]) -> bool:
    first, second = normalize_email(first), normalize_email(second)
    return bool(first) and first == second


@dataclass(frozen=True)
class Rule:
    name: str
    message: str
    predicate: Predicate

    def __call__(self, requester: User, owner: Optional[str] = None) -> bool:
        return self.predicate(requester, owner)

    def __and__(self, other: "Rule") -> "Rule":
        return Rule(
            f"{self.name} and {other.name}",
            self.message,
            lambda requester, owner: self(requester, owner) and other(requester, owner)
        )

    def __or__(self, other: "Rule") -> "Rule":
        return Rule(
            f"{self.name} or {other.name}",
            self.message,
            lambda requester, owner: self(requester, owner) or other(requester, owner)
        )

    def with_message(self, message: str) -> "Rule":
        return Rule(self.name, message, self.predicate)


def has_role(*roles: Role) -> Rule:
    names = "/".join(role.value for role in roles)
    return Rule(
        f"role:{names}",
        f"{names.capitalize()} access required",
        lambda requester, owner: requester.role in roles
    )


IS_ADMIN = has_role(Role.ADMIN)
IS_STAFF = has_role(Role.STAFF)
IS_CITIZEN = has_role(Role.CITIZEN).with_message("Only citizens can report issues")
IS_OWNER = Rule("owner", "Forbidden: Not your issue", lambda requester, owner: same_identity(requester.email, owner))
NOT_OWNER = Rule("not-owner", "You cannot upvote your own issue", lambda requester, owner: not same_identity(requester.email, owner))
NOT_BLOCKED = Rule("not-blocked", "Blocked users cannot perform this action", lambda requester, owner: not requester.is_blocked)
SELF_OR_ADMIN = (IS_OWNER | IS_ADMIN).with_message("Forbidden: Cannot access other user's profile")
OWNER_OR_ADMIN = (IS_OWNER | IS_ADMIN).with_message("Forbidden: you can only delete your own issues")
IS_ASSIGNEE = Rule("assignee", "Issue is not assigned to you", lambda requester, owner: same_identity(requester.email, owner))


def is_allowed(requester: Optional[User], rule: Rule, owner: Optional[str] = None) -> bool:
    return requester is not None and rule(requester, owner)


def check(requester: Optional[User], rule: Rule, owner: Optional[str] = None) -> User:
    if not is_allowed(requester, rule, owner):
        logger.info(
            "Denied %s for %s",
            rule.name,
            requester.email if requester is not None else "unknown requester"
        )
        raise Forbidden(rule.message)
    return requester
