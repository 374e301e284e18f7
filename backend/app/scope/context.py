"""
Authorization boundary used for every verification read or write.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class VerificationScope:
    """
    Either an organization (API consumers and organization members) or an
    anonymous session bucket. Exactly one of the two ids is set.
    """

    organization_id: Optional[str] = None
    session_id: Optional[str] = None

    def __post_init__(self) -> None:
        if bool(self.organization_id) == bool(self.session_id):
            raise ValueError("Scope needs exactly one of organization_id or session_id")

    @classmethod
    def for_organization(cls, organization_id: str) -> "VerificationScope":
        return cls(organization_id=organization_id)

    @classmethod
    def for_session(cls, session_id: str) -> "VerificationScope":
        return cls(session_id=session_id)

    @property
    def is_organization(self) -> bool:
        return self.organization_id is not None
