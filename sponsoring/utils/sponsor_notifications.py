# sponsoring/utils/sponsor_notifications.py
"""
Sponsor email content.

This module builds (but never sends) the messages sponsors receive:
- Benefit delivered notifications
- Portal access invitations
- Sponsorship confirmations
- Payment receipts
- Refund notices

Sending goes through `sponsoring.core.email.EmailService`.
"""
from typing import Any, Optional

from sponsoring.constants.sponsoring import DEFAULT_CURRENCY
from sponsoring.core.email import EmailMessage
from sponsoring.utils.dates import as_utc
from sponsoring.utils.deliverables import get_deliverable_status_label

BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;"
)
BUTTON_STYLE = (
    "display: inline-block; background: {color}; color: white; padding: 12px 24px; "
    "text-decoration: none; border-radius: 6px;"
)


def build_greeting(sponsor: Any) -> str:
    if sponsor.contact_name:
        return f"Dear {sponsor.contact_name}"
    return f"Dear {sponsor.name} team"


def format_amount(amount: Optional[int], currency: Optional[str] = None) -> Optional[str]:
    """Render minor currency units, e.g. 150000 -> '1,500.00 EUR'."""
    if not amount:
        return None
    return f"{amount / 100:,.2f} {currency or DEFAULT_CURRENCY}"


def _format_date(value) -> str:
    return as_utc(value).strftime("%d %B %Y")


def _wrap_html(title: str, color: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="{BODY_STYLE}">
  <h1 style="color: {color};">{title}</h1>
{body}
</body>
</html>"""


def _button(url: str, label: str, color: str) -> str:
    return f'  <p><a href="{url}" style="{BUTTON_STYLE.format(color=color)}">{label}</a></p>'


def _sign_off(event_name: str) -> str:
    return f"  <p>Best regards,<br>The {event_name} Team</p>"


def _text(*lines: Optional[str]) -> str:
    # None marks an optional line that was left out
    return "\n".join(line for line in lines if line is not None)


# ==================== Benefit Delivered ====================

def build_benefit_delivered_email(
    to: str, sponsor: Any, deliverable: Any, event_name: str
) -> EmailMessage:
    greeting = build_greeting(sponsor)
    status_label = get_deliverable_status_label(deliverable.status)
    delivered_on = _format_date(deliverable.delivered_at) if deliverable.delivered_at else None

    details = [f'    <p style="margin: 0; font-weight: 600;">{deliverable.benefit_name}</p>']
    if deliverable.description:
        details.append(f'    <p style="margin: 8px 0 0; color: #666;">{deliverable.description}</p>')
    details.append(
        f'    <p style="margin: 8px 0 0; font-size: 0.9em; color: #666;">'
        f'Status: <span style="color: #16a34a; font-weight: 500;">{status_label}</span></p>'
    )
    if delivered_on:
        details.append(
            f'    <p style="margin: 4px 0 0; font-size: 0.9em; color: #666;">Delivered on: {delivered_on}</p>'
        )

    body = [
        f"  <p>{greeting},</p>",
        "  <p>We're pleased to inform you that one of your sponsorship benefits has been delivered:</p>",
        '  <div style="background: #f4f4f5; padding: 16px; border-radius: 8px; margin: 16px 0;">',
        *details,
        "  </div>",
    ]
    if deliverable.notes:
        body.append(f"  <p><strong>Notes:</strong> {deliverable.notes}</p>")
    body.append(f"  <p>Thank you for your continued partnership with {event_name}!</p>")
    body.append(_sign_off(event_name))

    text = _text(
        "Benefit Delivered!",
        "",
        f"{greeting},",
        "",
        "We're pleased to inform you that one of your sponsorship benefits has been delivered:",
        "",
        deliverable.benefit_name,
        deliverable.description or None,
        f"Status: {status_label}",
        f"Delivered on: {delivered_on}" if delivered_on else None,
        *(["", f"Notes: {deliverable.notes}"] if deliverable.notes else []),
        "",
        f"Thank you for your continued partnership with {event_name}!",
        "",
        "Best regards,",
        f"The {event_name} Team",
    )

    return EmailMessage(
        to=to,
        subject=f"{event_name} - Benefit Delivered: {deliverable.benefit_name}",
        html=_wrap_html("Benefit Delivered!", "#16a34a", "\n".join(body)),
        text=text,
    )


# ==================== Portal Invitation ====================

def build_portal_invitation_email(
    to: str,
    sponsor: Any,
    event_name: str,
    portal_url: str,
    package_name: Optional[str] = None,
) -> EmailMessage:
    greeting = build_greeting(sponsor)
    body = [
        f"  <p>{greeting},</p>",
        f"  <p>You have been granted access to the {event_name} Sponsor Portal.</p>",
    ]
    if package_name:
        body.append(f"  <p>Your sponsorship package: <strong>{package_name}</strong></p>")
    body += [
        "  <p>Click the button below to access your sponsor portal where you can follow the delivery of your benefits.</p>",
        _button(portal_url, "Access Sponsor Portal", "#2563eb"),
        '  <p style="color: #666; font-size: 0.9em;">This link is unique to your organization. Please do not share it.</p>',
        _sign_off(event_name),
    ]

    text = _text(
        "Sponsor Portal Access",
        "",
        f"{greeting},",
        "",
        f"You have been granted access to the {event_name} Sponsor Portal.",
        f"Your sponsorship package: {package_name}" if package_name else None,
        "",
        f"Access your portal here: {portal_url}",
        "",
        "This link is unique to your organization. Please do not share it.",
        "",
        "Best regards,",
        f"The {event_name} Team",
    )

    return EmailMessage(
        to=to,
        subject=f"{event_name} - Sponsor Portal Access",
        html=_wrap_html("Sponsor Portal Access", "#2563eb", "\n".join(body)),
        text=text,
    )


# ==================== Sponsorship Confirmed ====================

def build_sponsorship_confirmed_email(
    to: str,
    sponsor: Any,
    event_name: str,
    package_name: Optional[str] = None,
    amount: Optional[str] = None,
    portal_url: Optional[str] = None,
) -> EmailMessage:
    greeting = build_greeting(sponsor)
    body = [
        f"  <p>{greeting},</p>",
        f"  <p>We are thrilled to confirm your sponsorship of <strong>{event_name}</strong>!</p>",
    ]
    if package_name:
        body.append(f"  <p>Package: <strong>{package_name}</strong></p>")
    if amount:
        body.append(f"  <p>Amount: <strong>{amount}</strong></p>")
    body.append("  <p>Thank you for your support! We look forward to showcasing your brand at our event.</p>")
    if portal_url:
        body.append(_button(portal_url, "Access Sponsor Portal", "#16a34a"))
    body.append(_sign_off(event_name))

    text = _text(
        "Sponsorship Confirmed!",
        "",
        f"{greeting},",
        "",
        f"We are thrilled to confirm your sponsorship of {event_name}!",
        f"Package: {package_name}" if package_name else None,
        f"Amount: {amount}" if amount else None,
        "",
        "Thank you for your support!",
        f"Access your portal: {portal_url}" if portal_url else None,
        "",
        "Best regards,",
        f"The {event_name} Team",
    )

    return EmailMessage(
        to=to,
        subject=f"{event_name} - Sponsorship Confirmed!",
        html=_wrap_html("Sponsorship Confirmed!", "#16a34a", "\n".join(body)),
        text=text,
    )


# ==================== Payment Received ====================

def build_payment_received_email(
    to: str, sponsor: Any, event_name: str, amount: Optional[str] = None
) -> EmailMessage:
    greeting = build_greeting(sponsor)
    body = [
        f"  <p>{greeting},</p>",
        f"  <p>We have received your payment for {event_name} sponsorship.</p>",
    ]
    if amount:
        body.append(f"  <p>Amount received: <strong>{amount}</strong></p>")
    body += ["  <p>Thank you for your support!</p>", _sign_off(event_name)]

    text = _text(
        "Payment Received",
        "",
        f"{greeting},",
        "",
        f"We have received your payment for {event_name} sponsorship.",
        f"Amount received: {amount}" if amount else None,
        "",
        "Thank you for your support!",
        "",
        "Best regards,",
        f"The {event_name} Team",
    )

    return EmailMessage(
        to=to,
        subject=f"{event_name} - Payment Received",
        html=_wrap_html("Payment Received", "#16a34a", "\n".join(body)),
        text=text,
    )


# ==================== Sponsorship Refunded ====================

def build_sponsorship_refunded_email(
    to: str,
    sponsor: Any,
    event_name: str,
    package_name: Optional[str] = None,
    amount: Optional[str] = None,
) -> EmailMessage:
    greeting = build_greeting(sponsor)
    body = [
        f"  <p>{greeting},</p>",
        f"  <p>We are writing to inform you that your sponsorship of <strong>{event_name}</strong> has been refunded.</p>",
    ]
    if package_name:
        body.append(f"  <p>Package: <strong>{package_name}</strong></p>")
    if amount:
        body.append(f"  <p>Refunded amount: <strong>{amount}</strong></p>")
    body += [
        "  <p>The refund will be processed to your original payment method.</p>",
        "  <p>If you have any questions, please don't hesitate to reach out.</p>",
        _sign_off(event_name),
    ]

    text = _text(
        "Sponsorship Refund",
        "",
        f"{greeting},",
        "",
        f"We are writing to inform you that your sponsorship of {event_name} has been refunded.",
        f"Package: {package_name}" if package_name else None,
        f"Refunded amount: {amount}" if amount else None,
        "",
        "The refund will be processed to your original payment method.",
        "",
        "If you have any questions, please don't hesitate to reach out.",
        "",
        "Best regards,",
        f"The {event_name} Team",
    )

    return EmailMessage(
        to=to,
        subject=f"{event_name} - Sponsorship Refund",
        html=_wrap_html("Sponsorship Refund", "#dc2626", "\n".join(body)),
        text=text,
    )
