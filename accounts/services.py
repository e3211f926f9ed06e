"""
Accounts Services - self-service registration

Candidates register with a profile; agencies register an owner account
together with the agency itself. Each registration is a single transaction:
either every row exists afterwards or none does.
"""

import logging
from typing import List, NamedTuple, Optional

from django.db import IntegrityError, transaction

from agencies.models import Agency, AgencyMember
from api.exceptions import ResourceAlreadyExistsError
from notifications.realtime import ADMIN_NEW_SIGNUP
from notifications.services import NotificationService

from .models import CandidateProfile, User

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists."


class AgencyRegistration(NamedTuple):
    owner: User
    agency: Agency


class RegistrationService:
    """
    Create candidate and agency accounts.

    Online administrators are told about every signup through the
    notification service; that push is best-effort.
    """

    def __init__(self, notification_service: NotificationService):
        self.notification_service = notification_service

    def register_candidate(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: str = '',
    ) -> User:
        """
        Create a CANDIDATE user and its candidate profile.

        Raises:
            ResourceAlreadyExistsError: If the email is already registered
        """
        email = self._normalize_email(email)
        self._ensure_email_available(email)

        try:
            with transaction.atomic():
                user = self._create_user(email, password, User.Role.CANDIDATE, first_name, last_name)
                CandidateProfile.objects.create(
                    user=user,
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone or '',
                )
        except IntegrityError as e:
            raise self._duplicate() from e

        logger.info(f"Candidate registered: user {user.id}")
        self._announce_signup(user, 'Candidate')
        return user

    def register_agency(
        self,
        email: str,
        password: str,
        agency_name: str,
        website: str = '',
    ) -> AgencyRegistration:
        """
        Create an AGENCY user, the agency and the owner's membership.

        Raises:
            ResourceAlreadyExistsError: If the email is already registered
        """
        email = self._normalize_email(email)
        self._ensure_email_available(email)

        try:
            with transaction.atomic():
                owner = self._create_user(email, password, User.Role.AGENCY)
                agency = Agency.objects.create(name=agency_name, website=website or '')
                AgencyMember.objects.create(
                    agency=agency,
                    user=owner,
                    role=AgencyMember.Role.OWNER,
                )
        except IntegrityError as e:
            raise self._duplicate() from e

        logger.info(f"Agency registered: agency {agency.id} owned by user {owner.id}")
        self._announce_signup(owner, 'Agency')
        return AgencyRegistration(owner=owner, agency=agency)

    # ==================== HELPERS ====================

    @staticmethod
    def _normalize_email(email: str) -> str:
        return email.strip().lower()

    def _ensure_email_available(self, email: str):
        if User.objects.filter(email__iexact=email).exists():
            raise self._duplicate()

    @staticmethod
    def _duplicate() -> ResourceAlreadyExistsError:
        return ResourceAlreadyExistsError(
            detail=DUPLICATE_EMAIL_MESSAGE,
            resource_type='User',
            conflicting_fields=['email'],
        )

    @staticmethod
    def _create_user(
        email: str,
        password: str,
        role: str,
        first_name: str = '',
        last_name: str = '',
    ) -> User:
        return User.objects.create_user(
            username=email,
            email=email,
            password=password,
            role=role,
            first_name=first_name,
            last_name=last_name,
        )

    def _announce_signup(self, user: User, account_type: str) -> Optional[int]:
        try:
            return self.notification_service.emit_to_users(
                admin_user_ids(),
                ADMIN_NEW_SIGNUP,
                {'id': user.id, 'email': user.email, 'role': user.role, 'type': account_type},
            )
        except Exception:
            logger.exception(f"Failed to announce signup of user {user.id}")
            return None


def admin_user_ids() -> List[int]:
    return list(
        User.objects
        .filter(role=User.Role.ADMIN, is_active=True)
        .values_list('id', flat=True)
    )
