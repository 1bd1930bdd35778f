from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

from careerdesk.core.errors import AuthorizationError, NotAuthenticated

Role = Literal["admin", "employer", "alumni"]
ROLES: tuple[str, ...] = ("admin", "employer", "alumni")


@dataclass(frozen=True, slots=True)
class Principal:
    role: Role
    subject_id: int
    handle: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_session(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_session(cls, data: Any) -> Principal | None:
        if not isinstance(data, dict):
            return None
        role = data.get("role")
        subject_id = data.get("subject_id")
        if role not in ROLES or not isinstance(subject_id, int):
            return None
        return cls(role=role, subject_id=subject_id, handle=str(data.get("handle", "")))

    @classmethod
    def operator(cls) -> Principal:
        """Admin principal for local tooling that runs outside any HTTP session."""
        return cls(role="admin", subject_id=0, handle="operator")


def require_role(principal: Principal | None, role: Role) -> Principal:
    if principal is None:
        raise NotAuthenticated("Not logged in")
    if principal.role != role:
        raise AuthorizationError(f"Forbidden: {role} capability required")
    return principal
