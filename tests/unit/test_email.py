import pytest

from clinic import email_service
from clinic.email_templates import STATUS_COLORS, appointment_status_template
from clinic.services.notification_service import AppointmentNotification, EmailNotifier


def render(status: str = "approved", **overrides) -> str:
    fields = {
        "patient_name": "Pat",
        "doctor_name": "Dr. Ada Grey",
        "appointment_id": 17,
        "appointment_time": "2025-01-10T09:00",
        "location": "Main Campus",
        "consultation_type": "video",
        "status": status,
    }
    fields.update(overrides)
    return appointment_status_template(**fields)


class TestAppointmentStatusTemplate:
    def test_contains_visit_details(self) -> None:
        mjml = render()

        assert "<mjml>" in mjml
        assert "Hi Pat" in mjml
        assert "Dr. Ada Grey" in mjml
        assert "2025-01-10" in mjml and "09:00" in mjml
        assert "Main Campus" in mjml
        assert "video" in mjml

    @pytest.mark.parametrize("status", ["approved", "rejected"])
    def test_status_is_highlighted(self, status: str) -> None:
        assert STATUS_COLORS[status] in render(status)


class TestEmailNotifier:
    @pytest.mark.asyncio
    async def test_sends_sanitized_status_email(self, monkeypatch) -> None:
        sent: dict = {}

        async def fake_send_email(to, subject, mjml_content, from_address=None):
            sent.update(to=to, subject=subject, body=mjml_content)
            return {"id": "test"}

        monkeypatch.setattr(email_service, "send_email", fake_send_email)

        await EmailNotifier().dispatch(
            AppointmentNotification(
                appointment_id=3,
                doctor_name="Dr. <b>Grey</b>",
                patient_name="Pat",
                recipient_email="pat@example.com",
                appointment_time="2025-01-10T09:00",
                location="Main Campus",
                consultation_type="in-person",
                status="rejected",
            )
        )

        assert sent["to"] == "pat@example.com"
        assert sent["subject"] == "Your Appointment Status"
        assert "rejected" in sent["body"]
        assert "<b>Grey</b>" not in sent["body"]
        assert "&lt;b&gt;Grey&lt;/b&gt;" in sent["body"]

    @pytest.mark.asyncio
    async def test_unconfigured_email_raises(self, monkeypatch) -> None:
        monkeypatch.setattr(email_service, "RESEND_API_KEY", None)

        with pytest.raises(Exception, match="not configured"):
            await email_service.send_email("pat@example.com", "Hi", "<mjml></mjml>")
