from __future__ import annotations

import html
from datetime import datetime, timezone
from typing import Any, Mapping

from app.core.config import RESTAURANT_NAME, RESTAURANT_SITE_URL

_LAYOUT = """\
<div style="background:#030712;font-family:Arial,Helvetica,sans-serif;max-width:560px;margin:0 auto;border-radius:14px;overflow:hidden;border:1px solid #e5e5e5;">
  <div style="background:#101828;color:#ffffff;text-align:center;padding:24px;">
    <h1 style="margin:0;font-size:24px;">{restaurant_name}</h1>
  </div>
  <div style="padding:24px;color:#f9fafb;line-height:1.6;">
    {body}
  </div>
  <div style="background:#101828;text-align:center;color:#ffffff;font-size:12px;padding:12px;">
    &copy; {year} {restaurant_name}. All rights reserved.
  </div>
</div>
"""

TEMPLATES: dict[str, tuple[str, str]] = {
    "reservation_approved": (
        "Your Reservation Has Been Approved!",
        "<h2>Reservation Confirmed</h2>"
        "<p>Hi <b>{name}</b>,</p>"
        "<p>We're thrilled to have you dine with us at <b>{restaurant_name}</b>. "
        "Your reservation{schedule} has been approved successfully!</p>"
        '<p style="text-align:center;margin:30px 0;">'
        '<a href="{site_url}" style="background:#101828;color:#ffffff;text-decoration:none;'
        'padding:12px 24px;border-radius:6px;font-weight:bold;">View Reservation</a></p>'
        "<p style=\"font-size:13px;text-align:center;\">Thank you for choosing <b>{restaurant_name}</b>. "
        "We look forward to serving you soon!</p>",
    ),
    "reservation_cancelled": (
        "Your Reservation Was Cancelled",
        "<h2>Reservation Cancelled</h2>"
        "<p>Hi <b>{name}</b>,</p>"
        "<p>We're sorry to inform you that your reservation at <b>{restaurant_name}</b> "
        "has been cancelled. You may book again anytime.</p>",
    ),
    "reservation_confirmation": (
        "Your Reservation is Confirmed",
        "<h2>Reservation Confirmed</h2>"
        "<p>Hi <strong>{name}</strong>,</p>"
        "<p>We're delighted to let you know that your reservation has been <strong>confirmed</strong>!</p>"
        '<div style="border:1px solid #374151;padding:15px;border-radius:8px;margin-top:15px;">'
        "<p><strong>Date:</strong> {date}</p>"
        "<p><strong>Time:</strong> {time}</p>"
        "<p><strong>Guests:</strong> {guests}</p>"
        "</div>"
        "<p>We look forward to hosting you at <strong>{restaurant_name}</strong>.</p>"
        '<p style="font-size:13px;">If you have any questions, simply reply to this email.</p>'
        "<p>Warm regards,<br><strong>The {restaurant_name} Team</strong></p>",
    ),
    "marketing": (
        "{subject}",
        "<h2>{subject}</h2>"
        "<p>{content}</p>"
        "<hr />"
        '<p style="font-size:12px;">You received this email because you subscribed to {restaurant_name}.</p>',
    ),
    "offer": (
        "{subject}",
        "<h2>{subject}</h2>"
        "<p>{message}</p>"
        '<p style="margin-top:30px;"><strong>You received this email because you subscribed '
        "to {restaurant_name} updates.</strong></p>",
    ),
}


def render_email(template: str, variables: Mapping[str, Any]) -> tuple[str, str]:
    """Return ``(subject, html)`` for ``template``; every variable is HTML-escaped."""
    if template not in TEMPLATES:
        raise KeyError(f"Unknown email template: {template}")
    subject_template, body_template = TEMPLATES[template]

    raw = {"restaurant_name": RESTAURANT_NAME, "site_url": RESTAURANT_SITE_URL, **variables}
    escaped = {key: html.escape(str(value), quote=True) for key, value in raw.items()}
    # Newlines in free-text bodies become line breaks.
    for key in ("content", "message"):
        if key in escaped:
            escaped[key] = escaped[key].replace("\n", "<br>")

    subject = subject_template.format(**{key: str(value) for key, value in raw.items()})
    body = body_template.format(**escaped)
    page = _LAYOUT.format(
        restaurant_name=escaped["restaurant_name"],
        body=body,
        year=datetime.now(timezone.utc).year,
    )
    return subject, page
