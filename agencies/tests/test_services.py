"""
Tests for agency membership lookups.
"""

import pytest
from django.db import IntegrityError

from agencies.services import (
    check_agency_membership,
    get_agency_for_user,
    get_agency_id_for_user,
    get_member_user_ids,
)
from api.exceptions import PermissionDeniedError, ResourceNotFoundError


@pytest.mark.django_db
class TestAgencyLookups:

    def test_agency_for_member(self, agency_member):
        assert get_agency_id_for_user(agency_member.user_id) == agency_member.agency_id
        assert get_agency_for_user(agency_member.user_id) == agency_member.agency

    def test_agency_for_non_member(self, user_factory):
        user = user_factory()

        assert get_agency_id_for_user(user.id) is None
        with pytest.raises(ResourceNotFoundError):
            get_agency_for_user(user.id)

    def test_member_user_ids(self, agency_factory, agency_member_factory):
        agency = agency_factory()
        owner = agency_member_factory(agency=agency, role='OWNER')
        member = agency_member_factory(agency=agency, role='MEMBER')
        agency_member_factory()

        assert sorted(get_member_user_ids(agency.id)) == sorted([owner.user_id, member.user_id])

    def test_membership_is_unique(self, agency_member, agency_member_factory):
        with pytest.raises(IntegrityError):
            agency_member_factory(agency=agency_member.agency, user=agency_member.user)


@pytest.mark.django_db
class TestCheckAgencyMembership:

    @pytest.mark.parametrize('role', ['OWNER', 'MANAGER'])
    def test_managing_roles(self, agency_member_factory, role):
        member = agency_member_factory(role=role)

        assert check_agency_membership(member.user_id, member.agency_id) == member
        assert member.can_manage is True

    def test_plain_member_is_refused(self, agency_member_factory, caplog):
        member = agency_member_factory(role='MEMBER')

        with pytest.raises(PermissionDeniedError):
            check_agency_membership(member.user_id, member.agency_id)
        assert 'SECURITY' in caplog.text

    def test_member_of_other_agency(self, agency_member, agency_factory):
        with pytest.raises(PermissionDeniedError):
            check_agency_membership(agency_member.user_id, agency_factory().id)
