from datetime import date

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.database import get_db
from app.core.errors import register_exception_handlers
from app.deps import require_staff
from app.email import service as email_service_module
from app.email.base import EmailSendResult
from app.email.service import EmailService
from app.models.audit_log import AuditLog
from app.models.email_message_log import EmailMessageLog
from app.models.reservation import Reservation
from app.routers.reservations import legacy_router, router as reservations_router
from tests.fixtures_data import DIRECTOR, RESERVATION_PAYLOAD


class FailingProvider:
    name = "resend"

    def __init__(self, exc: Exception | None = None) -> None:
        self.exc = exc

    def is_configured(self) -> bool:
        return True

    def send(self, message):
        if self.exc is not None:
            raise self.exc
        return EmailSendResult(status="failed", error="mailbox unavailable")


def _build_client(db, user=DIRECTOR) -> TestClient:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(reservations_router)
    app.include_router(legacy_router)
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[require_staff] = lambda: user
    return TestClient(app)


def _seed_reservation(db, **overrides) -> Reservation:
    values = {
        "name": "Maria Lopez",
        "email": "maria@example.com",
        "phone": "555-0100",
        "guests": 2,
        "date": date(2026, 11, 2),
        "time": "19:30",
        "reservation_status": "pending",
        "notes": "",
    }
    values.update(overrides)
    reservation = Reservation(**values)
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


def test_public_booking_starts_pending(db_session):
    client = _build_client(db_session)

    response = client.post("/api/reservations", json=RESERVATION_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["reservationStatus"] == "pending"
    assert body["email"] == "maria@example.com"
    assert body["date"] == "2026-11-02"
    assert body["notes"] == "Window table if possible"
    assert db_session.query(Reservation).count() == 1


def test_booking_rejects_malformed_time(db_session):
    client = _build_client(db_session)

    response = client.post("/api/reservations", json={**RESERVATION_PAYLOAD, "time": "7pm"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid value for 'time'")
    assert db_session.query(Reservation).count() == 0


def test_list_filters_by_status(db_session):
    _seed_reservation(db_session)
    _seed_reservation(db_session, name="Omar", reservation_status="confirmed")
    client = _build_client(db_session)

    everything = client.get("/api/reservations").json()["reservations"]
    confirmed = client.get("/api/reservations", params={"status": "confirmed"}).json()["reservations"]

    assert len(everything) == 2
    assert [item["name"] for item in confirmed] == ["Omar"]


def test_get_unknown_reservation_is_404(db_session):
    client = _build_client(db_session)

    response = client.get("/api/reservations/999")

    assert response.status_code == 404
    assert response.json() == {"detail": "Reservation not found"}


def test_non_numeric_id_is_rejected_with_400(db_session):
    client = _build_client(db_session)

    response = client.get("/api/reservations/not-a-number")

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "reservation_id"


def test_confirming_a_reservation_emails_the_guest(db_session, mock_mailer):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.put(f"/api/reservations/{reservation.id}", json={"reservationStatus": "confirmed"})

    assert response.status_code == 200
    assert response.json()["reservationStatus"] == "confirmed"
    assert [message.to for message in mock_mailer.outbox] == [["maria@example.com"]]
    audit = db_session.query(AuditLog).one()
    assert audit.action == "reservation_status_changed"
    assert db_session.query(EmailMessageLog).one().kind == "reservation_approved"


def test_cancelling_a_reservation_emails_the_guest(db_session, mock_mailer):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.put(f"/api/reservations/{reservation.id}", json={"reservationStatus": "cancelled"})

    assert response.status_code == 200
    assert response.json()["reservationStatus"] == "cancelled"
    assert [message.subject for message in mock_mailer.outbox] == ["Your Reservation Was Cancelled"]
    assert mock_mailer.outbox[0].to == ["maria@example.com"]
    assert db_session.query(EmailMessageLog).one().kind == "reservation_cancelled"


def test_completing_a_reservation_sends_no_email(db_session, mock_mailer):
    reservation = _seed_reservation(db_session, reservation_status="confirmed")
    client = _build_client(db_session)

    response = client.put(f"/api/reservations/{reservation.id}", json={"reservationStatus": "completed"})

    assert response.status_code == 200
    assert mock_mailer.outbox == []


def test_update_rejects_unknown_status(db_session):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.put(f"/api/reservations/{reservation.id}", json={"reservationStatus": "teleported"})

    assert response.status_code == 400
    db_session.refresh(reservation)
    assert reservation.reservation_status == "pending"


def test_update_without_fields_is_400(db_session):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.put(f"/api/reservations/{reservation.id}", json={})

    assert response.status_code == 400
    assert response.json() == {"detail": "No fields to update"}


def test_delete_twice_returns_404_the_second_time(db_session):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    first = client.delete(f"/api/reservations/{reservation.id}")
    second = client.delete(f"/api/reservations/{reservation.id}")

    assert first.status_code == 200
    assert first.json()["reservation"]["id"] == reservation.id
    assert second.status_code == 404
    assert db_session.query(Reservation).count() == 0


def test_approve_confirms_and_reports_email(db_session, mock_mailer):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.post(f"/api/reservations/{reservation.id}/approve")

    assert response.status_code == 200
    assert response.json()["emailSent"] is True
    db_session.refresh(reservation)
    assert reservation.reservation_status == "confirmed"
    assert len(mock_mailer.outbox) == 1
    assert "for 2026-11-02 at 19:30" in mock_mailer.outbox[0].html


def test_legacy_approve_path_still_works(db_session, mock_mailer):
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.post(f"/api/approve/{reservation.id}")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_approve_keeps_status_when_email_fails(db_session, monkeypatch):
    monkeypatch.setattr(
        email_service_module,
        "_email_service",
        EmailService(resend_provider=FailingProvider()),
    )
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.post(f"/api/reservations/{reservation.id}/approve")

    assert response.status_code == 200
    assert response.json()["emailSent"] is False
    db_session.refresh(reservation)
    assert reservation.reservation_status == "confirmed"
    assert db_session.query(EmailMessageLog).one().status == "failed"


def test_status_change_survives_provider_crash(db_session, monkeypatch):
    monkeypatch.setattr(
        email_service_module,
        "_email_service",
        EmailService(resend_provider=FailingProvider(RuntimeError("boom"))),
    )
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.put(f"/api/reservations/{reservation.id}", json={"reservationStatus": "cancelled"})

    assert response.status_code == 200
    db_session.refresh(reservation)
    assert reservation.reservation_status == "cancelled"


def test_send_confirmation_uses_reservation_details(db_session, mock_mailer):
    reservation = _seed_reservation(db_session, guests=6)
    client = _build_client(db_session)

    response = client.post(f"/api/reservations/{reservation.id}/send-confirmation")

    assert response.status_code == 200
    assert response.json()["success"] is True
    html = mock_mailer.outbox[0].html
    assert "2026-11-02" in html
    assert "19:30" in html


def test_send_confirmation_failure_is_500(db_session, monkeypatch):
    monkeypatch.setattr(
        email_service_module,
        "_email_service",
        EmailService(resend_provider=FailingProvider()),
    )
    reservation = _seed_reservation(db_session)
    client = _build_client(db_session)

    response = client.post(f"/api/reservations/{reservation.id}/send-confirmation")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to send email"}


def test_stats_routes_are_not_shadowed_by_id_route(db_session):
    _seed_reservation(db_session)
    _seed_reservation(db_session, reservation_status="confirmed")
    _seed_reservation(db_session, reservation_status="completed")
    client = _build_client(db_session)

    stats = client.get("/api/reservations/stats", params={"range": "all"})
    summary = client.get("/api/reservations/summary")
    trend = client.get("/api/reservations/trend")

    assert stats.json() == {"total": 3, "pending": 1, "completed": 1}
    assert summary.json() == {"total": 3, "pending": 1, "completed": 1}
    assert sum(point["count"] for point in trend.json()) == 3
