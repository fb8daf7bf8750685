"""Pass delivery - HTML email and WhatsApp message for an event pass."""

import logging
from html import escape

from app.core.config import settings
from app.core.constants import MIN_PHONE_DIGITS, QR_CODE_WIDTH
from app.schemas.event_pass import PassRead
from app.services import qr_service, resend_email_service, whatsapp_service
from app.utils.formatting import format_amount, format_event_date
from app.utils.normalization import (
    is_valid_email,
    normalize_whatsapp_phone,
    strip_phone_separators,
)

logger = logging.getLogger(__name__)


class PassDeliveryError(Exception):
    """Base exception for pass delivery errors."""

    pass


class DeliveryNotConfiguredError(PassDeliveryError):
    pass


class DeliveryValidationError(PassDeliveryError):
    pass


class DeliveryFailedError(PassDeliveryError):
    pass


# =============================================================================
# Email
# =============================================================================

_BADGE_STYLE = (
    "display:inline-block;padding:2px 10px;font-size:12px;font-weight:600;"
    "border-radius:12px;"
)
_LABEL_STYLE = (
    "margin:0;font-size:11px;text-transform:uppercase;letter-spacing:0.05em;color:#9ca3af;"
)


def _type_badge(pass_type: str) -> str:
    if pass_type == "guest":
        return f'<span style="{_BADGE_STYLE}background-color:#f3e8ff;color:#7e22ce;">Guest</span>'
    return f'<span style="{_BADGE_STYLE}background-color:#dbeafe;color:#1d4ed8;">Resident</span>'


def _food_section(event_pass: PassRead) -> str:
    if not (event_pass.has_food and event_pass.items):
        return ""

    rows = "".join(
        f"""
        <tr>
          <td style="padding:4px 0;font-size:14px;color:#374151;">{escape(item.name)} &times; {item.plates}</td>
          <td style="padding:4px 0;font-size:14px;color:#6b7280;text-align:right;">&#8377;{format_amount(item.plates * item.price_per_plate)}</td>
        </tr>"""
        for item in event_pass.items
    )
    plates = event_pass.total_plates
    plural = "" if plates == 1 else "s"
    return f"""
      <tr>
        <td style="padding:16px 24px;border-top:1px dashed #e5e7eb;">
          <p style="margin:0 0 8px;font-size:11px;text-transform:uppercase;letter-spacing:0.05em;color:#9ca3af;">Items Ordered</p>
          <table width="100%" cellpadding="0" cellspacing="0" style="border-collapse:collapse;">
            {rows}
            <tr>
              <td colspan="2" style="padding:8px 0 0;border-top:1px solid #f3f4f6;">
                <table width="100%" cellpadding="0" cellspacing="0">
                  <tr>
                    <td style="font-size:14px;font-weight:600;color:#1f2937;">Total ({plates} plate{plural})</td>
                    <td style="font-size:14px;font-weight:600;color:#111827;text-align:right;">&#8377;{format_amount(event_pass.total_amount)}</td>
                  </tr>
                </table>
              </td>
            </tr>
          </table>
        </td>
      </tr>"""


def _payment_section(event_pass: PassRead) -> str:
    if not event_pass.has_food:
        return ""
    if event_pass.paid:
        background, border, color, text = "#f0fdf4", "#bbf7d0", "#15803d", "Payment Received"
    else:
        background, border, color, text = "#fffbeb", "#fde68a", "#b45309", "Payment Pending"
    return f"""
      <tr>
        <td style="padding:0 24px 20px;">
          <div style="border-radius:8px;padding:10px;text-align:center;font-size:14px;font-weight:500;background-color:{background};color:{color};border:1px solid {border};">
            {text}
          </div>
        </td>
      </tr>"""


def render_pass_email_html(event_pass: PassRead, qr_code_data_url: str, pass_url: str) -> str:
    """Render the pass card email (inline styles for mail clients)."""
    site = escape(settings.SITE_NAME)
    title = escape(event_pass.event_title)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Event Pass - {title}</title>
</head>
<body style="margin:0;padding:0;background-color:#f9fafb;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,'Helvetica Neue',Arial,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color:#f9fafb;padding:32px 16px;">
    <tr>
      <td align="center">
        <table width="100%" cellpadding="0" cellspacing="0" style="max-width:420px;background-color:#ffffff;border-radius:16px;overflow:hidden;border:1px solid #e5e7eb;">
          <tr>
            <td style="background-color:#1d4ed8;padding:16px 24px;color:#ffffff;">
              <p style="margin:0;font-size:11px;font-weight:500;text-transform:uppercase;letter-spacing:0.1em;opacity:0.8;">{site}</p>
              <h1 style="margin:4px 0 0;font-size:20px;font-weight:700;">Event Pass</h1>
            </td>
          </tr>
          <tr>
            <td style="padding:20px 24px 16px;border-bottom:1px dashed #e5e7eb;">
              <h2 style="margin:0;font-size:18px;font-weight:700;color:#111827;">{title}</h2>
              <p style="margin:4px 0 0;font-size:14px;color:#6b7280;">{format_event_date(event_pass.event_date)}</p>
            </td>
          </tr>
          <tr>
            <td style="padding:16px 24px;border-bottom:1px dashed #e5e7eb;">
              <table width="100%" cellpadding="0" cellspacing="0">
                <tr>
                  <td>
                    <p style="{_LABEL_STYLE}">Name</p>
                    <p style="margin:2px 0 0;font-size:16px;font-weight:600;color:#111827;">{escape(event_pass.name)}</p>
                  </td>
                  <td style="text-align:right;vertical-align:top;">
                    {_type_badge(event_pass.type)}
                  </td>
                </tr>
              </table>
              <div style="margin-top:12px;">
                <p style="{_LABEL_STYLE}">Location</p>
                <p style="margin:2px 0 0;font-size:14px;font-weight:500;color:#1f2937;">Block {event_pass.block} &mdash; Flat {escape(event_pass.flat_number)}</p>
              </div>
            </td>
          </tr>
          <tr>
            <td style="padding:20px 24px;text-align:center;">
              <div style="display:inline-block;padding:12px;border:2px solid #f3f4f6;border-radius:12px;">
                <img src="{qr_code_data_url}" width="{QR_CODE_WIDTH}" height="{QR_CODE_WIDTH}" alt="QR Code" style="display:block;" />
              </div>
              <p style="margin:12px 0 0;font-size:12px;color:#6b7280;">
                <a href="{escape(pass_url, quote=True)}" style="color:#2563eb;text-decoration:underline;">View Pass Online</a>
              </p>
            </td>
          </tr>
          {_food_section(event_pass)}
          {_payment_section(event_pass)}
          <tr>
            <td style="background-color:#f9fafb;padding:12px 24px;text-align:center;">
              <p style="margin:0;font-size:10px;color:#9ca3af;">Show this pass at the event entrance for verification</p>
            </td>
          </tr>
        </table>
        <p style="margin:16px 0 0;font-size:11px;color:#9ca3af;text-align:center;">
          This email was sent from {site} community portal.
        </p>
      </td>
    </tr>
  </table>
</body>
</html>"""


def pass_email_subject(event_pass: PassRead) -> str:
    return f"Your Event Pass: {event_pass.event_title}"


def validate_email_request(email: str | None, pass_url: str | None) -> tuple[str, str]:
    """Check configuration and inputs for an email send. Returns (email, pass_url)."""
    if not settings.email_configured:
        raise DeliveryNotConfiguredError("Email service not configured")
    email = (email or "").strip()
    if not is_valid_email(email):
        raise DeliveryValidationError("Please enter a valid email address")
    pass_url = (pass_url or "").strip()
    if not pass_url:
        raise DeliveryValidationError("Pass URL is required")
    return email, pass_url


async def send_pass_email(
    event_pass: PassRead,
    email: str,
    pass_url: str,
    idempotency_key: str | None = None,
) -> None:
    """Render and send the pass email. Raises DeliveryFailedError on provider failure."""
    html = render_pass_email_html(event_pass, qr_service.qr_data_url(pass_url), pass_url)
    success, error, _ = await resend_email_service.send_email(
        email,
        pass_email_subject(event_pass),
        html,
        idempotency_key=idempotency_key,
    )
    if not success:
        logger.warning(
            "Pass email failed: %s", error, extra={"pass_code": event_pass.pass_code}
        )
        raise DeliveryFailedError("Failed to send email")
    logger.info("Pass email sent", extra={"pass_code": event_pass.pass_code})


def pass_url_for(pass_code: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}/pass/{pass_code}"


async def send_pass_email_after_rsvp(event_pass: PassRead) -> None:
    """
    Email a freshly created pass to its holder.

    Runs as a background task after the RSVP response; failures are logged
    and never reach the caller.
    """
    if not settings.email_configured:
        return
    try:
        await send_pass_email(
            event_pass,
            event_pass.email,
            pass_url_for(event_pass.pass_code),
            idempotency_key=f"pass-email/{event_pass.pass_code}",
        )
    except DeliveryFailedError:
        logger.warning(
            "Automatic pass email not delivered",
            extra={"pass_code": event_pass.pass_code},
        )


# =============================================================================
# WhatsApp
# =============================================================================


def compose_pass_whatsapp_message(event_pass: PassRead, pass_url: str) -> str:
    return "\n".join(
        [
            f"\U0001F3AB *{settings.SITE_NAME} — Event Pass*",
            "",
            f"*Event:* {event_pass.event_title}",
            f"*Date:* {format_event_date(event_pass.event_date)}",
            f"*Name:* {event_pass.name}",
            f"*Location:* Block {event_pass.block} — Flat {event_pass.flat_number}",
            "",
            "View your pass here:",
            pass_url,
            "",
            "Show this pass at the event entrance for verification.",
        ]
    )


def validate_whatsapp_request(phone: str | None, pass_url: str | None) -> tuple[str, str]:
    """Check configuration and inputs for a WhatsApp send. Returns (e164 phone, pass_url)."""
    if not settings.whatsapp_configured:
        raise DeliveryNotConfiguredError("WhatsApp service not configured")
    phone = (phone or "").strip()
    if len(strip_phone_separators(phone)) < MIN_PHONE_DIGITS:
        raise DeliveryValidationError("Please enter a valid phone number")
    pass_url = (pass_url or "").strip()
    if not pass_url:
        raise DeliveryValidationError("Pass URL is required")
    return normalize_whatsapp_phone(phone), pass_url


async def send_pass_whatsapp(event_pass: PassRead, phone: str, pass_url: str) -> None:
    """Send the pass link over WhatsApp. Raises DeliveryFailedError on provider failure."""
    success, error = await whatsapp_service.send_whatsapp(
        phone, compose_pass_whatsapp_message(event_pass, pass_url)
    )
    if not success:
        logger.warning(
            "Pass WhatsApp failed: %s", error, extra={"pass_code": event_pass.pass_code}
        )
        raise DeliveryFailedError("Failed to send WhatsApp message")
    logger.info("Pass WhatsApp sent", extra={"pass_code": event_pass.pass_code})
