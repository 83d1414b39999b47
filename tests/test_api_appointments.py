"""End-to-end tests through the HTTP API"""

from datetime import date

import pytest
from conftest import booking_payload, next_weekday

from app.main import app
from app.models import Appointment, Client, Holiday
from app.shared.clock import utc_today


def upcoming(weekday: int) -> str:
    return next_weekday(utc_today(), weekday).isoformat()


@pytest.mark.asyncio
async def test_book_monday_appointment(client, db_session, branch, appointment_type, fake_channels):
    payload = booking_payload(branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=upcoming(0))

    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Client created and appointment scheduled successfully"
    assert body["status"] == "PENDING"
    assert body["branchName"] == "Sede Centro"
    assert body["appointmentNumber"].startswith("APT-")
    assert body["clientNumber"].startswith("CLI-")

    # Background confirmation ran after the response
    assert fake_channels.gmail.calls[0][0] == "confirmation"


@pytest.mark.asyncio
async def test_sunday_booking_rejected_but_client_kept(client, db_session, branch, appointment_type):
    payload = booking_payload(branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=upcoming(6))

    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Appointments cannot be scheduled on Sundays"
    db_session.expire_all()
    assert db_session.query(Client).count() == 1
    assert db_session.query(Appointment).count() == 0


@pytest.mark.asyncio
async def test_booking_works_without_notification_channels(client, db_session, branch, appointment_type, monkeypatch):
    monkeypatch.setattr(app.state, "channels", None)
    payload = booking_payload(branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=upcoming(0))

    response = await client.post("/appointments/simple", json=payload)
    health = await client.get("/health/channels")

    assert response.status_code == 200
    assert response.json()["status"] == "PENDING"
    assert health.status_code == 503
    db_session.expire_all()
    assert db_session.query(Appointment).count() == 1


@pytest.mark.asyncio
async def test_past_date_rejected(client, branch, appointment_type):
    payload = booking_payload(
        branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=date(2020, 1, 6).isoformat()
    )

    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Appointments cannot be scheduled on past dates"


@pytest.mark.asyncio
async def test_missing_branch_is_503(client, appointment_type):
    payload = booking_payload(branchId=55, appointmentTypeId=appointment_type.id, appointmentDate=upcoming(0))

    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 503


@pytest.mark.asyncio
async def test_validation_errors_are_listed(client, branch, appointment_type):
    payload = booking_payload(
        branchId=branch.id,
        appointmentTypeId=appointment_type.id,
        documentType="XX",
        mobile="12345",
        appointmentTime="25:00",
        appointmentDate="not-a-date",
    )

    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["detail"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {"documentType", "mobile", "appointmentTime", "appointmentDate"} <= fields


@pytest.mark.asyncio
async def test_iso_timestamp_date_is_accepted(client, branch, appointment_type):
    day = upcoming(1)
    payload = booking_payload(
        branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=f"{day}T00:00:00.000Z"
    )

    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 200
    assert response.json()["appointmentDate"] == day


# ============================================================================
# STAFF LIFECYCLE
# ============================================================================


async def book(client, branch, appointment_type, **overrides) -> dict:
    payload = booking_payload(
        branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=upcoming(0), **overrides
    )
    response = await client.post("/appointments/simple", json=payload)
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_staff_cancel_then_cancel_again(client, db_session, branch, appointment_type, auth_headers):
    await book(client, branch, appointment_type)
    appointment_id = db_session.query(Appointment).one().id

    first = await client.put(
        f"/appointments/{appointment_id}/cancel", json={"reason": "Branch maintenance"}, headers=auth_headers
    )
    second = await client.put(f"/appointments/{appointment_id}/cancel", json={"reason": "again"}, headers=auth_headers)

    assert first.status_code == 200
    assert first.json()["status"] == "CANCELLED"
    assert first.json()["cancellationReason"] == "Branch maintenance"
    assert second.status_code == 400
    assert second.json()["detail"] == "Appointment is already cancelled"


@pytest.mark.asyncio
async def test_staff_cancel_unknown_is_404(client, auth_headers):
    response = await client.put("/appointments/999/cancel", json={}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Appointment not found"


@pytest.mark.asyncio
async def test_staff_endpoints_require_token(client):
    response = await client.put("/appointments/1/cancel", json={})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_public_cancel_and_client_listing(client, db_session, branch, appointment_type):
    booked = await book(client, branch, appointment_type)
    appointment_id = db_session.query(Appointment).one().id

    response = await client.post(
        f"/appointments/public/{appointment_id}/cancel",
        json={"clientNumber": booked["clientNumber"], "reason": "Travelling"},
    )
    assert response.status_code == 200

    listing = await client.get(f"/appointments/client/{booked['clientNumber']}")
    assert listing.status_code == 200
    assert [a["status"] for a in listing.json()] == ["CANCELLED"]

    lookup = await client.get(f"/clients/{booked['clientNumber']}")
    assert lookup.json()["documentNumber"] == "1075234567"


@pytest.mark.asyncio
async def test_confirm_complete_and_list_by_date(client, db_session, branch, appointment_type, auth_headers):
    booked = await book(client, branch, appointment_type)
    appointment_id = db_session.query(Appointment).one().id

    confirmed = await client.patch(
        f"/appointments/{appointment_id}/status", json={"status": "CONFIRMED"}, headers=auth_headers
    )
    completed = await client.put(
        f"/appointments/{appointment_id}/complete", json={"notes": "Done"}, headers=auth_headers
    )
    day_list = await client.get(
        "/appointments", params={"date": upcoming(0), "branch_id": branch.id}, headers=auth_headers
    )

    assert confirmed.json()["status"] == "CONFIRMED"
    assert completed.json()["status"] == "COMPLETED"
    assert completed.json()["completedAt"] is not None
    assert [a["appointmentNumber"] for a in day_list.json()] == [booked["appointmentNumber"]]


# ============================================================================
# CATALOGS, INBOX, HEALTH
# ============================================================================


@pytest.mark.asyncio
async def test_holiday_blocks_booking(client, branch, appointment_type, auth_headers):
    day = upcoming(2)
    created = await client.post(
        "/catalogs/holidays/local",
        json={"holidayDate": day, "holidayName": "Festival", "branchId": branch.id},
        headers=auth_headers,
    )
    assert created.status_code == 200
    assert created.json()["holidayType"] == "LOCAL"

    payload = booking_payload(branchId=branch.id, appointmentTypeId=appointment_type.id, appointmentDate=day)
    response = await client.post("/appointments/simple", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Appointments cannot be scheduled on holidays. Festival"


@pytest.mark.asyncio
async def test_company_holiday_and_past_holiday_via_api(client, auth_headers):
    company = await client.post(
        "/catalogs/holidays/company",
        json={"holidayDate": upcoming(3), "holidayName": "Company day"},
        headers=auth_headers,
    )
    past = await client.post(
        "/catalogs/holidays/national",
        json={"holidayDate": "2020-01-01", "holidayName": "New Year"},
        headers=auth_headers,
    )

    assert company.status_code == 200
    assert company.json()["holidayType"] == "COMPANY"
    assert company.json()["branchId"] is None
    assert past.status_code == 400
    assert past.json()["detail"] == "Holidays cannot be created in the past"


@pytest.mark.asyncio
async def test_inbox_receives_new_appointment(client, branch, appointment_type, auth_headers):
    await book(client, branch, appointment_type)

    count = await client.get("/notifications/me/unread-count", headers=auth_headers)
    inbox = await client.get("/notifications/me", headers=auth_headers)

    assert count.json() == {"unread": 1}
    item = inbox.json()[0]
    assert item["type"] == "IN_APP"
    assert item["title"] == "New Appointment Created"

    marked = await client.post(f"/notifications/{item['id']}/read", headers=auth_headers)
    assert marked.json()["isRead"] is True
    count = await client.get("/notifications/me/unread-count", headers=auth_headers)
    assert count.json() == {"unread": 0}


@pytest.mark.asyncio
async def test_branches_and_health(client, branch):
    branches = await client.get("/catalogs/branches")
    health = await client.get("/health/channels")

    assert [b["code"] for b in branches.json()] == ["NEI-01"]
    assert health.json()["channels"]["whatsapp"]["ready"] is True


@pytest.mark.asyncio
async def test_holiday_listing_defaults_to_current_utc_year(client, db_session):
    today = utc_today()
    db_session.add(Holiday(holiday_date=today, holiday_name="This year", holiday_type="NATIONAL"))
    db_session.add(Holiday(holiday_date=date(today.year - 1, 6, 1), holiday_name="Last year", holiday_type="NATIONAL"))
    db_session.commit()

    response = await client.get("/catalogs/holidays")

    assert [h["holidayName"] for h in response.json()] == ["This year"]
