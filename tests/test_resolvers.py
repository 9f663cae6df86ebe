"""Tests for venue and privilege-group name resolution."""
import asyncio

import pytest

from r1_server.errors import NotFoundError
from r1_server.resolvers import is_canonical_id, resolve_privilege_group_id, resolve_venue_ids
from conftest import GROUP_ID, VENUE_A, VENUE_B


VENUES = {"data": [{"id": VENUE_A, "name": "HQ"}, {"id": VENUE_B, "name": "Branch"}], "totalCount": 2}


def test_is_canonical_id():
    assert is_canonical_id(VENUE_A)
    assert is_canonical_id(VENUE_A.upper())
    assert not is_canonical_id("HQ")
    assert not is_canonical_id(VENUE_A[:-1])


def test_canonical_ids_pass_through_without_listing(fake, session):
    ids = asyncio.run(resolve_venue_ids(session, [VENUE_A, VENUE_B]))

    assert ids == [VENUE_A, VENUE_B]
    assert fake.calls == []


def test_names_resolve_with_a_single_listing_call(fake, session):
    fake.on("POST", "/venues/query", VENUES)
    ids = asyncio.run(resolve_venue_ids(session, ["Branch", VENUE_A, "HQ"]))

    assert ids == [VENUE_B, VENUE_A, VENUE_A]
    assert len(fake.calls_to("POST", "/venues/query")) == 1


def test_unknown_venue_lists_available_names(fake, session):
    fake.on("POST", "/venues/query", VENUES)

    with pytest.raises(NotFoundError) as exc_info:
        asyncio.run(resolve_venue_ids(session, ["Warehouse"]))

    err = exc_info.value
    assert err.available == ["HQ", "Branch"]
    assert str(err) == 'Venue "Warehouse" not found. Available venue names: HQ, Branch'


def test_privilege_group_by_name(fake, session):
    fake.on("GET", "/roleAuthentications/privilegeGroups", [{"id": GROUP_ID, "name": "NOC"}])
    assert asyncio.run(resolve_privilege_group_id(session, "NOC")) == GROUP_ID


def test_privilege_group_id_passes_through(fake, session):
    assert asyncio.run(resolve_privilege_group_id(session, GROUP_ID)) == GROUP_ID
    assert fake.calls == []


def test_unknown_privilege_group(fake, session):
    fake.on("GET", "/roleAuthentications/privilegeGroups", [{"id": GROUP_ID, "name": "NOC"}])

    with pytest.raises(NotFoundError) as exc_info:
        asyncio.run(resolve_privilege_group_id(session, "Helpdesk"))
    assert exc_info.value.available == ["NOC"]
    assert "Available privilege group names: NOC" in str(exc_info.value)
