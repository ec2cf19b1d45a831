from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from salon_booking.application.utils.auth_errors import map_auth_error
from salon_booking.application.utils.exports import bookings_to_csv, booking_to_ics
from salon_booking.application.utils.formatting import format_currency, format_date_label, format_minutes, to_cents
from salon_booking.application.utils.urls import avatar_from_seed, is_allowed_return_url, safe_http_url, safe_next_path
from salon_booking.domain.entities.booking import Booking, Customer


def test_format_minutes():
    assert format_minutes(90) == "1 h 30 min"
    assert format_minutes(120) == "2 h"
    assert format_minutes(45) == "45 min"
    assert format_minutes(None) == ""


def test_format_currency_uses_german_separators():
    assert format_currency(25) == "25,00 €"
    assert format_currency(1234.5) == "1.234,50 €"
    assert format_currency(None) == "0,00 €"


def test_date_label_and_cents():
    assert format_date_label("2025-10-18") == "Sat, 18.10.2025"
    assert format_date_label("not-a-date") == "not-a-date"
    assert to_cents(19.99) == 1999
    assert to_cents(-5) == 0


def test_return_urls_must_match_allowed_origin():
    assert is_allowed_return_url("https://salon.example/booking.html", "https://salon.example")
    assert is_allowed_return_url("https://b.example/x", "https://a.example, https://b.example/")
    assert not is_allowed_return_url("https://evil.example/x", "https://salon.example")
    assert not is_allowed_return_url("/booking.html", "https://salon.example")
    # wildcard trusts the requesting origin only
    assert is_allowed_return_url("http://localhost:3000/x", "*", "http://localhost:3000")
    assert not is_allowed_return_url("https://evil.example/x", "*", "http://localhost:3000")


def test_safe_next_path_only_allows_local_pages():
    assert safe_next_path("dashboard.html") == "dashboard.html"
    assert safe_next_path("https://evil.example/dashboard.html") is None
    assert safe_next_path("//evil.example/x.html") is None
    assert safe_next_path("dashboard") is None
    assert safe_next_path(None) is None


def test_safe_http_url_and_avatar():
    assert safe_http_url(" https://img.example/a.png ") == "https://img.example/a.png"
    assert safe_http_url("javascript:alert(1)") == ""
    assert avatar_from_seed("Ada L").startswith("https://api.dicebear.com/9.x/initials/svg?seed=Ada%20L")
    assert avatar_from_seed("  ") == ""


def test_auth_errors_map_to_friendly_messages():
    assert map_auth_error("Invalid login credentials") == "Email or password is incorrect."
    assert map_auth_error("User already registered") == "This email is already registered."
    assert map_auth_error("Something odd") == "Something odd"
    assert map_auth_error(None) == "Unknown error."


def test_csv_escapes_customer_fields():
    booking = Booking(
        id="b1",
        service_id="s",
        service_name="Comb twist",
        duration_min=90,
        date_iso="2025-10-14",
        time="12:00",
        customer=Customer(first_name="Ada", last_name="Lovelace", notes='Says "hi", twice'),
    )

    lines = bookings_to_csv([booking]).splitlines()

    assert lines[1].endswith('"Says ""hi"", twice"')


def test_ics_converts_local_time_to_utc():
    booking = Booking(id="b1", service_id="s", service_name="Cornrows", duration_min=60, date_iso="2025-01-14", time="11:00")

    ics = booking_to_ics(
        booking,
        ZoneInfo("Europe/Berlin"),
        "Studio",
        "Main street 1",
        now=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )

    assert "DTSTAMP:20250101T000000Z" in ics
    assert "DTSTART:20250114T100000Z" in ics
    assert "DTEND:20250114T110000Z" in ics
    assert "LOCATION:Main street 1" in ics
