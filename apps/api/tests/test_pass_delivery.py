"""Tests for pass message composition and the helpers behind it."""
import uuid
from datetime import datetime, timezone

import pytest

from app.core.config import settings
from app.schemas.event_pass import PassItem, PassRead
from app.services import flat_service, pass_delivery_service, qr_service
from app.services.pass_delivery_service import DeliveryValidationError
from app.utils.formatting import format_event_date
from app.utils.normalization import normalize_name, normalize_whatsapp_phone


def _pass(**overrides) -> PassRead:
    data = dict(
        type="guest",
        pass_code="g-" + str(uuid.uuid4()),
        event_title="Diwali <Dinner>",
        # 19:30 UTC is already the next day in Asia/Kolkata
        event_date=datetime(2026, 10, 18, 19, 30, tzinfo=timezone.utc),
        announcement_id=uuid.uuid4(),
        name="Visiting Cousin",
        email="cousin@example.com",
        block=1,
        flat_number="102",
        has_food=True,
        items=[PassItem(name="Veg Thali", plates=2, price_per_plate=150)],
        paid=False,
        notes=None,
        created_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
        attended=False,
        attended_at=None,
        field_responses=[],
    )
    data.update(overrides)
    return PassRead(**data)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("09876543210", "+919876543210"),
        ("98765 43210", "+919876543210"),
        ("(987) 654-3210", "+919876543210"),
        ("+14155550100", "+14155550100"),
    ],
)
def test_normalize_whatsapp_phone(raw, expected):
    assert normalize_whatsapp_phone(raw) == expected


def test_normalize_name_collapses_whitespace():
    assert normalize_name("  Asha   Rao ") == "Asha Rao"
    assert normalize_name("   ") is None


def test_format_event_date_uses_community_timezone():
    assert format_event_date(datetime(2026, 10, 18, 19, 30, tzinfo=timezone.utc)) == "19 October 2026"
    # Naive values are read as UTC
    assert format_event_date(datetime(2026, 10, 18, 12, 0)) == "18 October 2026"


def test_whatsapp_message_layout():
    message = pass_delivery_service.compose_pass_whatsapp_message(_pass(), "https://portal.test/pass/g-1")
    lines = message.splitlines()
    assert "*Event:* Diwali <Dinner>" in lines
    assert "*Date:* 19 October 2026" in lines
    assert "*Name:* Visiting Cousin" in lines
    assert lines[-3] == "https://portal.test/pass/g-1"


def test_email_html_escapes_and_summarizes_food():
    html = pass_delivery_service.render_pass_email_html(
        _pass(), "data:image/png;base64,AAAA", "https://portal.test/pass/g-1"
    )
    assert "Diwali &lt;Dinner&gt;" in html
    assert "Diwali <Dinner>" not in html
    assert "Total (2 plates)" in html
    assert "&#8377;300.00" in html
    assert "Payment Pending" in html
    assert "Guest</span>" in html


def test_email_html_without_food_has_no_payment_banner():
    html = pass_delivery_service.render_pass_email_html(
        _pass(has_food=False, items=[], type="resident"),
        "data:image/png;base64,AAAA",
        "https://portal.test/pass/r-1",
    )
    assert "Items Ordered" not in html
    assert "Payment" not in html
    assert "Resident</span>" in html


def test_whatsapp_validation_counts_digits(monkeypatch):
    monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "token")

    with pytest.raises(DeliveryValidationError):
        pass_delivery_service.validate_whatsapp_request("98-76 5", "https://portal.test/p")
    phone, url = pass_delivery_service.validate_whatsapp_request(
        " 98765-43210 ", " https://portal.test/p "
    )
    assert (phone, url) == ("+919876543210", "https://portal.test/p")


def test_qr_data_url_is_png():
    assert qr_service.qr_data_url("https://portal.test/pass/r-1").startswith(
        "data:image/png;base64,"
    )


def test_parse_roster_skips_noise():
    roster = [
        "BLOCK FLAT TYPE\n",
        "1 101 2BHK\n",
        "1,102\n",
        "\n",
        "9 901\n",
        "x 12\n",
        "2\n",
        "1 101\n",
    ]
    assert flat_service.parse_roster(roster) == [(1, "101"), (1, "102")]
