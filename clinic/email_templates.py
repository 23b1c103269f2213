"""
MJML Email Templates
"""

from typing import Optional

from .config import FRONTEND_URL

THEME = {
    "primary": "#14b8a6",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#14b8a6",
    "danger": "#ef4444",
}

STATUS_COLORS = {
    "approved": THEME["success"],
    "rejected": THEME["danger"],
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="32px 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Thank you for using our service.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def appointment_status_template(
    patient_name: str,
    doctor_name: str,
    appointment_id: int,
    appointment_time: str,
    location: str,
    consultation_type: str,
    status: str,
) -> str:
    """Appointment approved/rejected notification for the patient"""
    status_color = STATUS_COLORS.get(status, THEME["text_primary"])
    date_part, _, time_part = appointment_time.partition("T")

    content = f"""
    <mj-text>
      Hi {patient_name},
    </mj-text>

    <mj-text>
      Your appointment status has been changed to
      <strong style="color: {status_color};">{status}</strong>.
    </mj-text>

    <mj-divider border-color="{THEME['border']}" border-width="1px" padding="16px 0" />

    <mj-text font-size="15px" color="{THEME['text_primary']}" padding="0">
      <strong>Appointment ID:</strong> {appointment_id}<br/>
      <strong>Doctor:</strong> {doctor_name}<br/>
      <strong>Date &amp; Time:</strong> 📅 {date_part} ⏰ {time_part}<br/>
      <strong>Location:</strong> {location}<br/>
      <strong>Consultation Type:</strong> {consultation_type}
    </mj-text>
    """

    return get_base_template(
        title="Your Appointment Status",
        preview_text=f"Appointment with {doctor_name} {status}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/appointments",
        cta_label="View My Appointments",
    )
