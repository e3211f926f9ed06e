"""
Authenticated principal passed into service calls.

Views resolve the request user once and hand services an immutable
``AuthenticatedPrincipal`` instead of the request object, so services never
read ambient request state.
"""

from dataclasses import dataclass
from typing import Optional

from api.exceptions import PermissionDeniedError


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Identity and affiliations of the caller."""

    user_id: int
    email: str
    role: str
    agency_id: Optional[int] = None
    candidate_id: Optional[int] = None

    @classmethod
    def from_user(cls, user) -> 'AuthenticatedPrincipal':
        """
        Build a principal for an authenticated user.

        Resolves the user's agency (first membership) and candidate profile.
        """
        from agencies.services import get_agency_id_for_user
        from .models import CandidateProfile

        candidate_id = (
            CandidateProfile.objects
            .filter(user_id=user.pk)
            .values_list('id', flat=True)
            .first()
        )
        return cls(
            user_id=user.pk,
            email=user.email,
            role=user.role,
            agency_id=get_agency_id_for_user(user.pk),
            candidate_id=candidate_id,
        )

    @property
    def is_agency_member(self) -> bool:
        return self.agency_id is not None

    @property
    def is_candidate(self) -> bool:
        return self.candidate_id is not None

    def require_agency(self) -> int:
        """Return the caller's agency id or refuse the action."""
        if self.agency_id is None:
            raise PermissionDeniedError(
                detail="This action is only available to agency members.",
                required_permission='agency_member',
            )
        return self.agency_id

    def require_candidate(self) -> int:
        """Return the caller's candidate profile id or refuse the action."""
        if self.candidate_id is None:
            raise PermissionDeniedError(
                detail="This action is only available to candidates with a profile.",
                required_permission='candidate',
            )
        return self.candidate_id
