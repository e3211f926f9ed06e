"""
Agency membership lookups used by the ATS and notification services.
"""

import logging
from typing import List, Optional

from api.exceptions import PermissionDeniedError, ResourceNotFoundError

from .models import Agency, AgencyMember

logger = logging.getLogger(__name__)


def get_agency_id_for_user(user_id) -> Optional[int]:
    """Id of the agency the user joined first, or None."""
    return (
        AgencyMember.objects
        .filter(user_id=user_id)
        .order_by('joined_at', 'id')
        .values_list('agency_id', flat=True)
        .first()
    )


def get_agency_for_user(user_id) -> Agency:
    """
    Return the agency a user belongs to.

    Raises:
        ResourceNotFoundError: If the user is not a member of any agency
    """
    agency_id = get_agency_id_for_user(user_id)
    if agency_id is None:
        raise ResourceNotFoundError(
            detail="Agency not found for the current user.",
            resource_type='Agency',
        )
    return Agency.objects.get(pk=agency_id)


def check_agency_membership(user_id, agency_id) -> AgencyMember:
    """
    Require an OWNER or MANAGER membership of the given agency.

    Raises:
        PermissionDeniedError: If the user is not an authorized member
    """
    member = AgencyMember.objects.filter(
        user_id=user_id,
        agency_id=agency_id,
        role__in=AgencyMember.MANAGING_ROLES,
    ).first()

    if member is None:
        logger.warning(
            f"SECURITY: User {user_id} is not an authorized member of agency {agency_id}"
        )
        raise PermissionDeniedError(
            detail="User is not an authorized member of this agency.",
            required_permission='agency_manager',
        )
    return member


def get_member_user_ids(agency_id) -> List[int]:
    """User ids of every member of the agency."""
    return list(
        AgencyMember.objects
        .filter(agency_id=agency_id)
        .values_list('user_id', flat=True)
    )
