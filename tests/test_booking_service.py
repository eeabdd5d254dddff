from datetime import date

import pytest
from sqlalchemy import update

from models import Booking, BookingStatus, PaymentStatus
from schemas.booking import BookingCreate
from services.booking_service import BookingService
from utils.exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError

UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"


def _booking_data(prop, **overrides):
    data = {
        "property_id": prop.id,
        "property_type": "single",
        "gender": "male",
        "move_in_date": date(2026, 9, 1),
        "duration": "6 months",
        "amount": 500,
    }
    data.update(overrides)
    return BookingCreate(**data)


@pytest.fixture
def parties(make_user, make_property):
    agent = make_user(role="agent")
    other_agent = make_user(role="agent")
    student = make_user(role="student")
    other_student = make_user(role="student")
    admin = make_user(role="admin")
    prop = make_property(agent=agent)
    return {
        "agent": agent,
        "other_agent": other_agent,
        "student": student,
        "other_student": other_student,
        "admin": admin,
        "property": prop,
    }


def _as(user, role):
    return {"id": user.id, "role": role}


# ---------------------------------------------------------------------------
# create_booking
# ---------------------------------------------------------------------------

def test_student_books_for_self(db, parties):
    student, agent = parties["student"], parties["agent"]

    booking = BookingService.create_booking(
        db, _booking_data(parties["property"]), _as(student, "student")
    )

    assert booking.tenant_id == student.id
    assert booking.agent_id == agent.id
    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.version == 1


def test_student_tenant_field_is_ignored(db, parties):
    student = parties["student"]

    booking = BookingService.create_booking(
        db,
        _booking_data(parties["property"], tenant=parties["other_student"].id),
        _as(student, "student"),
    )

    assert booking.tenant_id == student.id


def test_agent_must_name_tenant(db, parties):
    with pytest.raises(BadRequestError, match="Tenant is required when an agent creates a booking"):
        BookingService.create_booking(
            db, _booking_data(parties["property"]), _as(parties["agent"], "agent")
        )


def test_agent_books_for_named_tenant(db, parties):
    booking = BookingService.create_booking(
        db,
        _booking_data(parties["property"], tenant=parties["student"].id, status="confirmed"),
        _as(parties["agent"], "agent"),
    )

    assert booking.tenant_id == parties["student"].id
    assert booking.status == BookingStatus.CONFIRMED


def test_admin_must_name_existing_tenant(db, parties):
    admin = _as(parties["admin"], "admin")

    with pytest.raises(BadRequestError, match="Tenant is required"):
        BookingService.create_booking(db, _booking_data(parties["property"]), admin)
    with pytest.raises(BadRequestError, match="Invalid tenant ID"):
        BookingService.create_booking(db, _booking_data(parties["property"], tenant="nope"), admin)
    with pytest.raises(NotFoundError, match="Tenant not found"):
        BookingService.create_booking(db, _booking_data(parties["property"], tenant=UNKNOWN_ID), admin)


def test_create_requires_property_type_and_gender(db, parties):
    student = _as(parties["student"], "student")

    with pytest.raises(BadRequestError, match="propertyType is required"):
        BookingService.create_booking(db, _booking_data(parties["property"], property_type=None), student)
    with pytest.raises(BadRequestError, match="gender is required"):
        BookingService.create_booking(db, _booking_data(parties["property"], gender=None), student)

    assert db.query(Booking).count() == 0


def test_create_property_checks(db, parties, make_property):
    student = _as(parties["student"], "student")
    orphan = make_property(agent=None, title="No Agent Lodge")

    with pytest.raises(BadRequestError, match="Invalid property ID"):
        BookingService.create_booking(db, _booking_data(parties["property"], property_id="bad"), student)
    with pytest.raises(NotFoundError, match="Property not found"):
        BookingService.create_booking(db, _booking_data(parties["property"], property_id=UNKNOWN_ID), student)
    with pytest.raises(BadRequestError, match="Property has no assigned agent"):
        BookingService.create_booking(db, _booking_data(orphan), student)


# ---------------------------------------------------------------------------
# reads
# ---------------------------------------------------------------------------

def test_get_booking_by_id_access(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"])

    for user, role in (
        (parties["student"], "student"),
        (parties["agent"], "agent"),
        (parties["admin"], "admin"),
    ):
        found = BookingService.get_booking_by_id(db, booking.id, _as(user, role))
        assert found.id == booking.id

    for user, role in ((parties["other_student"], "student"), (parties["other_agent"], "agent")):
        with pytest.raises(UnauthorizedError, match="Access denied"):
            BookingService.get_booking_by_id(db, booking.id, _as(user, role))


def test_get_booking_by_id_validation(db, parties):
    admin = _as(parties["admin"], "admin")

    with pytest.raises(BadRequestError, match="Invalid booking ID"):
        BookingService.get_booking_by_id(db, "123", admin)
    with pytest.raises(NotFoundError, match="Booking not found"):
        BookingService.get_booking_by_id(db, UNKNOWN_ID, admin)


def test_get_all_bookings_is_scoped_by_role(db, parties, make_property, make_booking):
    other_prop = make_property(agent=parties["other_agent"], title="Harbour View")
    mine = make_booking(parties["property"], parties["student"])
    theirs = make_booking(other_prop, parties["other_student"])
    shared_agent = make_booking(parties["property"], parties["other_student"])

    student_view = BookingService.get_all_bookings(db, _as(parties["student"], "student"))
    assert {b.id for b in student_view["bookings"]} == {mine.id}
    assert student_view["count"] == 1

    agent_view = BookingService.get_all_bookings(db, _as(parties["agent"], "agent"))
    assert {b.id for b in agent_view["bookings"]} == {mine.id, shared_agent.id}

    admin_view = BookingService.get_all_bookings(db, _as(parties["admin"], "admin"))
    assert {b.id for b in admin_view["bookings"]} == {mine.id, theirs.id, shared_agent.id}
    assert admin_view["count"] == 3
    assert admin_view["last_updated"] is not None


def test_get_all_bookings_newest_first(db, parties, make_booking):
    first = make_booking(parties["property"], parties["student"])
    second = make_booking(parties["property"], parties["student"])

    result = BookingService.get_all_bookings(db, _as(parties["student"], "student"))

    assert [b.id for b in result["bookings"]] == [second.id, first.id]


def test_get_bookings_by_agent(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"])
    agent = parties["agent"]

    own = BookingService.get_bookings_by_agent(db, agent.id, _as(agent, "agent"))
    assert [b.id for b in own["bookings"]] == [booking.id]

    by_admin = BookingService.get_bookings_by_agent(db, agent.id, _as(parties["admin"], "admin"))
    assert by_admin["count"] == 1

    with pytest.raises(UnauthorizedError):
        BookingService.get_bookings_by_agent(db, agent.id, _as(parties["other_agent"], "agent"))
    with pytest.raises(UnauthorizedError):
        BookingService.get_bookings_by_agent(db, agent.id, _as(parties["student"], "student"))
    with pytest.raises(BadRequestError, match="Invalid agent ID"):
        BookingService.get_bookings_by_agent(db, "bad", _as(parties["admin"], "admin"))


# ---------------------------------------------------------------------------
# update_booking_status
# ---------------------------------------------------------------------------

def test_assigned_agent_confirms_booking(db, parties):
    student, agent = parties["student"], parties["agent"]
    booking = BookingService.create_booking(
        db, _booking_data(parties["property"]), _as(student, "student")
    )

    updated = BookingService.update_booking_status(db, booking.id, "confirmed", _as(agent, "agent"))

    assert updated.status == BookingStatus.CONFIRMED
    assert updated.version == 2
    db.expire_all()
    assert db.get(Booking, booking.id).status == BookingStatus.CONFIRMED

    with pytest.raises(UnauthorizedError, match="Only the assigned agent"):
        BookingService.update_booking_status(
            db, booking.id, "cancelled", _as(parties["other_agent"], "agent")
        )


@pytest.mark.parametrize("status", ["confirmed", "cancelled", None, "bogus"])
def test_non_agent_cannot_change_status(db, parties, make_booking, status):
    booking = make_booking(parties["property"], parties["student"])

    with pytest.raises(UnauthorizedError):
        BookingService.update_booking_status(
            db, booking.id, status, _as(parties["student"], "student")
        )


def test_admin_changes_status_and_transitions_are_permissive(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"], status="completed")

    updated = BookingService.update_booking_status(
        db, booking.id, "pending", _as(parties["admin"], "admin")
    )

    assert updated.status == BookingStatus.PENDING


def test_status_is_required_and_validated(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"])
    agent = _as(parties["agent"], "agent")

    with pytest.raises(BadRequestError, match="Status is required"):
        BookingService.update_booking_status(db, booking.id, None, agent)
    with pytest.raises(BadRequestError, match="Invalid status"):
        BookingService.update_booking_status(db, booking.id, "archived", agent)
    with pytest.raises(NotFoundError):
        BookingService.update_booking_status(db, UNKNOWN_ID, "confirmed", agent)


def test_stale_expected_version_conflicts(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"])
    agent = _as(parties["agent"], "agent")
    BookingService.update_booking_status(db, booking.id, "confirmed", agent, expected_version=1)

    with pytest.raises(ConflictError):
        BookingService.update_booking_status(db, booking.id, "cancelled", agent, expected_version=1)

    db.expire_all()
    assert db.get(Booking, booking.id).status == BookingStatus.CONFIRMED


def test_concurrent_write_conflicts(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"])
    # Another writer bumps the row behind this session's back
    db.execute(
        update(Booking.__table__)
        .where(Booking.__table__.c.id == booking.id)
        .values(status="cancelled", version=2)
    )

    with pytest.raises(ConflictError):
        BookingService.update_booking_status(
            db, booking.id, "confirmed", _as(parties["agent"], "agent")
        )


# ---------------------------------------------------------------------------
# delete_booking
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("who", ["admin", "agent", "student"])
def test_delete_allowed_parties(db, parties, make_booking, who):
    booking = make_booking(parties["property"], parties["student"])
    booking_id = booking.id

    BookingService.delete_booking(db, booking_id, _as(parties[who], who))

    db.expire_all()
    assert db.get(Booking, booking_id) is None


def test_delete_denied_for_others(db, parties, make_booking):
    booking = make_booking(parties["property"], parties["student"])

    for user, role in ((parties["other_student"], "student"), (parties["other_agent"], "agent")):
        with pytest.raises(UnauthorizedError, match="Access denied"):
            BookingService.delete_booking(db, booking.id, _as(user, role))

    assert db.query(Booking).count() == 1
