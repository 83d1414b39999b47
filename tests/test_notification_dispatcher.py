"""Tests for the notification dispatcher and the notification ledger"""

import pytest
from conftest import TODAY, booking_payload, create_user

from app.database import SessionLocal
from app.domain.notifications.dispatcher import EMAIL_FAILED, NotificationDispatcher
from app.domain.scheduling.schemas import SimpleAppointmentRequest
from app.domain.scheduling.service import AppointmentService
from app.models import Appointment, Notification, NotificationType, UserAssignment


@pytest.fixture
def appointment(db_session, branch, appointment_type):
    request = SimpleAppointmentRequest(
        **booking_payload(branchId=branch.id, appointmentTypeId=appointment_type.id)
    )
    AppointmentService(db_session).schedule_simple_appointment(request, today=TODAY)
    return db_session.query(Appointment).one()


@pytest.fixture
def dispatcher(fake_channels):
    return NotificationDispatcher(fake_channels, SessionLocal)


def ledger(db_session, appointment_id) -> list[Notification]:
    db_session.expire_all()
    return (
        db_session.query(Notification)
        .filter(Notification.appointment_id == appointment_id)
        .order_by(Notification.id)
        .all()
    )


@pytest.mark.asyncio
async def test_confirmation_email_only_by_default(db_session, appointment, dispatcher, fake_channels):
    results = await dispatcher.send_appointment_confirmation(appointment.id)

    assert results["email"] is True
    assert "whatsapp" not in results
    assert fake_channels.whatsapp.calls == []
    rows = ledger(db_session, appointment.id)
    assert [(r.type, r.status) for r in rows] == [("EMAIL", "SENT")]
    assert rows[0].client_id == appointment.client_id
    assert rows[0].sent_at is not None


@pytest.mark.asyncio
async def test_flags_are_read_on_every_dispatch(db_session, appointment, dispatcher, fake_channels, monkeypatch):
    await dispatcher.send_appointment_reminder(appointment.id)
    assert fake_channels.whatsapp.calls == []

    monkeypatch.setenv("WHATSAPP_NOTIFICATIONS_ENABLED", "true")
    monkeypatch.setenv("EMAIL_NOTIFICATIONS_ENABLED", "false")
    await dispatcher.send_appointment_reminder(appointment.id)

    assert len(fake_channels.gmail.calls) == 1
    assert len(fake_channels.whatsapp.calls) == 1
    kind, phone, data = fake_channels.whatsapp.calls[0]
    assert kind == "reminder"
    assert data["horasAntes"] == 24


@pytest.mark.asyncio
async def test_channel_returning_false_is_recorded_failed(db_session, appointment, dispatcher, fake_channels):
    fake_channels.gmail.result = False

    results = await dispatcher.send_appointment_confirmation(appointment.id)

    assert results["email"] is False
    row = ledger(db_session, appointment.id)[0]
    assert row.status == "FAILED"
    assert row.error_message == EMAIL_FAILED


@pytest.mark.asyncio
async def test_client_without_email_or_valid_phone_gets_nothing(
    db_session, appointment, dispatcher, fake_channels, monkeypatch
):
    monkeypatch.setenv("WHATSAPP_NOTIFICATIONS_ENABLED", "true")
    client = appointment.client
    client.email = None
    client.mobile = "12ab"
    client.phone = None
    db_session.commit()

    results = await dispatcher.send_appointment_cancellation(appointment.id, "Branch closed")

    assert results == {}
    assert fake_channels.gmail.calls == []
    assert fake_channels.whatsapp.calls == []
    assert ledger(db_session, appointment.id) == []


@pytest.mark.asyncio
async def test_cancellation_payload_defaults_reason(db_session, appointment, dispatcher, fake_channels):
    await dispatcher.send_appointment_cancellation(appointment.id)

    _, _, data = fake_channels.gmail.calls[0]
    assert data["motivo"] == "Not specified"
    assert data["urlReagendar"] == "https://electrohuila.com/reagendar"
    row = ledger(db_session, appointment.id)[0]
    assert row.message.endswith("Reason: Not specified")


@pytest.mark.asyncio
async def test_completed_is_whatsapp_only(db_session, appointment, dispatcher, fake_channels, monkeypatch):
    await dispatcher.send_appointment_completed(appointment.id)
    assert fake_channels.gmail.calls == []
    assert fake_channels.whatsapp.calls == []

    monkeypatch.setenv("WHATSAPP_NOTIFICATIONS_ENABLED", "true")
    results = await dispatcher.send_appointment_completed(appointment.id)

    assert results == {"whatsapp": True}
    assert fake_channels.gmail.calls == []
    assert fake_channels.whatsapp.calls[0][0] == "completed"


@pytest.mark.asyncio
async def test_in_app_only_for_active_assigned_staff(db_session, appointment, appointment_type, dispatcher):
    active = create_user(db_session, "active_agent")
    inactive = create_user(db_session, "inactive_agent", is_active=False)
    unassigned = create_user(db_session, "unassigned_agent")
    retired = create_user(db_session, "retired_assignment")
    db_session.add_all(
        [
            UserAssignment(user_id=active.id, appointment_type_id=appointment_type.id),
            UserAssignment(user_id=inactive.id, appointment_type_id=appointment_type.id),
            UserAssignment(user_id=retired.id, appointment_type_id=appointment_type.id, is_active=False),
        ]
    )
    db_session.commit()

    results = await dispatcher.send_appointment_confirmation(appointment.id)

    assert results["in_app"] == 1
    in_app = [r for r in ledger(db_session, appointment.id) if r.type == "IN_APP"]
    assert [r.user_id for r in in_app] == [active.id]
    assert in_app[0].status == "SENT"
    assert in_app[0].client_id is None
    assert unassigned.id not in [r.user_id for r in in_app]


@pytest.mark.asyncio
async def test_missing_appointment_is_a_no_op(db_session, dispatcher, fake_channels):
    assert await dispatcher.send_appointment_confirmation(9999) == {}
    assert await dispatcher.push_appointment_created(9999) == 0
    assert fake_channels.gmail.calls == []


@pytest.mark.asyncio
async def test_realtime_push_can_be_disabled(db_session, appointment, staff_user, dispatcher, fake_channels, monkeypatch):
    monkeypatch.setenv("REALTIME_NOTIFICATIONS_ENABLED", "false")

    assert await dispatcher.push_appointment_created(appointment.id) == 0
    assert fake_channels.realtime.published == []


# ============================================================================
# LEDGER INVARIANTS
# ============================================================================


def test_notification_requires_exactly_one_recipient():
    with pytest.raises(ValueError):
        Notification.create(NotificationType.EMAIL, "Title", "Body")
    with pytest.raises(ValueError):
        Notification.create(NotificationType.EMAIL, "Title", "Body", user_id=1, client_id=2)
    with pytest.raises(ValueError):
        Notification.create(NotificationType.EMAIL, "Title", "Body", client_id=0)


def test_notification_requires_title_and_message():
    with pytest.raises(ValueError):
        Notification.create(NotificationType.EMAIL, "", "Body", client_id=1)
    with pytest.raises(ValueError):
        Notification.create(NotificationType.EMAIL, "Title", " ", client_id=1)


def test_notification_status_transitions():
    notification = Notification.create(NotificationType.WHATSAPP, "Title", "Body", client_id=3)
    assert notification.status == "PENDING"

    with pytest.raises(ValueError):
        notification.mark_as_failed("")

    notification.mark_as_failed("timeout")
    assert notification.status == "FAILED"
    assert notification.error_message == "timeout"

    notification.mark_as_sent()
    assert notification.status == "SENT"
    assert notification.error_message is None

    notification.mark_as_read()
    first_read = notification.read_at
    notification.mark_as_read()
    assert notification.is_read
    assert notification.read_at == first_read
