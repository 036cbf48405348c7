"""
app/notifications/templates.py

Message bodies for credential and guardian attendance notifications.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from html import escape

CREDENTIALS_SUBJECT = "Your Login Credentials"
ATTENDANCE_ALERT_SUBJECT = "Daily Attendance Alert"

_CELL_STYLE = "border: 1px solid #ddd; padding: 8px;"
_HEADER_STYLE = "border: 1px solid #ddd; padding: 8px; text-align: left;"


def render_credentials_email(*, name: str, email: str, password: str) -> str:
    return (
        f"<p>Hello <b>{escape(name)}</b>,</p>"
        "<p>Your account has been created successfully.</p>"
        f"<p><b>Login Email:</b> {escape(email)}</p>"
        f"<p><b>Password:</b> {escape(password)}</p>"
        "<br/>"
        '<p style="color:gray;">Please keep this password safe.<br/>- Admin</p>'
    )


def render_attendance_alert_email(
    *,
    student_name: str,
    report_date: date,
    lines: Sequence[tuple[str, datetime, str]],
) -> str:
    """
    HTML report listing every class of the day with its status.

    ``lines`` holds ``(subject, class time, status)`` tuples.
    """

    flagged = next((status for _, _, status in lines if status != "PRESENT"), "absent")
    rows = "".join(
        "<tr>"
        f'<td style="{_CELL_STYLE}">{escape(subject)}</td>'
        f'<td style="{_CELL_STYLE}">{scheduled_at.strftime("%I:%M %p").lstrip("0")}</td>'
        f'<td style="{_CELL_STYLE} color: {"green" if status == "PRESENT" else "red"}; '
        f'font-weight: bold;">{escape(status)}</td>'
        "</tr>"
        for subject, scheduled_at, status in lines
    )
    return (
        f"<h2>Daily Attendance Report for {escape(student_name)}</h2>"
        "<p>Dear Guardian,</p>"
        f"<p>This is to inform you about your ward's attendance today, {report_date.strftime('%d/%m/%Y')}.</p>"
        "<p>You have received this email because your ward was marked as "
        f"<b>{escape(flagged.lower())}</b> for at least one class today.</p>"
        '<table style="width: 100%; border-collapse: collapse;">'
        "<thead><tr>"
        f'<th style="{_HEADER_STYLE}">Subject</th>'
        f'<th style="{_HEADER_STYLE}">Class Time</th>'
        f'<th style="{_HEADER_STYLE}">Status</th>'
        "</tr></thead>"
        f"<tbody>{rows}</tbody>"
        "</table>"
        "<p>This is an automated message. Please contact the college administration for any queries.</p>"
        "<p>Sincerely,</p>"
        "<p>College Administration</p>"
    )


def render_attendance_alert_sms(*, student_name: str) -> str:
    return (
        f"Daily Attendance Report: Your ward, {student_name}, was marked absent or late "
        "for one or more classes today. Please check the attendance portal for details."
    )
