from __future__ import annotations

import re
from datetime import date

from invportal import formatting


def test_format_date_defaults_to_long_month_name():
    assert formatting.format_date("2024-03-05") == "March 5, 2024"
    assert formatting.format_date("2024-03-05T08:30:00.000000Z") == "March 5, 2024"


def test_format_date_supports_named_formats():
    value = date(2024, 12, 1)
    assert formatting.format_date(value, "yyyy-mm-dd") == "2024-12-01"
    assert formatting.format_date(value, "d F, Y") == "1 December, 2024"
    assert formatting.format_date(value, "mm/dd/yyyy") == "12/01/2024"
    assert formatting.format_date("2024-12-01 14:05:09", "yyyy-mm-dd hh:mm:ss") == "2024-12-01 14:05:09"


def test_format_date_blank_and_unparseable_values():
    assert formatting.format_date(None) == formatting.EMPTY
    assert formatting.format_date("") == formatting.EMPTY
    assert formatting.format_date("next week") == "next week"


def test_format_currency_uses_peso_with_two_decimals():
    assert formatting.format_currency(1234.5) == "₱1,234.50"
    assert formatting.format_currency("0") == "₱0.00"
    assert formatting.format_currency(-12) == "-₱12.00"
    assert formatting.format_currency(None) == formatting.EMPTY
    assert formatting.format_currency("abc") == formatting.EMPTY
    assert formatting.format_currency("NaN") == formatting.EMPTY
    assert formatting.format_currency(float("-inf")) == formatting.EMPTY


def test_format_number_drops_trailing_zeros():
    assert formatting.format_number(1234) == "1,234"
    assert formatting.format_number("2.50") == "2.5"
    assert formatting.format_number("10.000") == "10"
    assert formatting.format_number(None) == "0"
    assert formatting.format_number("Infinity") == "0"
    assert formatting.format_number(float("nan")) == "0"


def test_status_helpers():
    assert formatting.format_status("under_repair") == "Under Repair"
    assert formatting.format_status(None) == formatting.EMPTY
    assert "emerald" in formatting.status_color("available")
    assert formatting.status_color("something-else") == formatting.DEFAULT_STATUS_COLOR


def test_truncate_and_display():
    assert formatting.truncate("a" * 60) == "a" * 50 + "…"
    assert formatting.truncate("short") == "short"
    assert formatting.truncate(None) == formatting.EMPTY
    assert formatting.display("  ") == formatting.EMPTY
    assert formatting.display(0) == 0


def test_generate_strong_password_has_every_character_class():
    for _ in range(25):
        password = formatting.generate_strong_password()
        assert len(password) == formatting.PASSWORD_LENGTH
        assert re.search(r"[a-z]", password)
        assert re.search(r"[A-Z]", password)
        assert re.search(r"\d", password)
        assert re.search(r"[@$!%*?&]", password)


def test_party_and_person_names():
    assert formatting.party_name({"full_name": "Ana Cruz", "name": "x"}) == "Ana Cruz"
    assert formatting.party_name({"name": "ICT Office"}) == "ICT Office"
    assert formatting.party_name({"first_name": "Ana", "last_name": "Cruz"}) == "Ana Cruz"
    assert formatting.party_name(None) == formatting.EMPTY
    assert formatting.person_name({"name": "ICT Office"}) == formatting.EMPTY
