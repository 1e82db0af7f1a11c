import re
from datetime import date, datetime

import pytest

from hexagono.services.quote_number import (
    extract_date_from_quote_number,
    extract_sequence_from_quote_number,
    generate_access_token,
    generate_quote_number,
    is_valid_access_token,
    is_valid_quote_number,
)

FIXED = datetime(2024, 12, 21, 10, 30, 0)


def test_generate_with_sequence():
    assert generate_quote_number(123, now=FIXED) == "COT-20241221-0123"
    assert generate_quote_number(5, now=FIXED) == "COT-20241221-0005"


def test_sequence_zero_is_kept():
    assert generate_quote_number(0, now=FIXED) == "COT-20241221-0000"


def test_sequence_wraps_modulo_10000():
    assert generate_quote_number(10001, now=FIXED) == "COT-20241221-0001"
    assert generate_quote_number(9999, now=FIXED) == "COT-20241221-9999"


def test_negative_sequence_rejected():
    with pytest.raises(ValueError):
        generate_quote_number(-1, now=FIXED)


def test_auto_sequence_format_and_date():
    number = generate_quote_number(now=FIXED)
    assert re.fullmatch(r"COT-20241221-[0-9]{4}", number)


def test_default_uses_local_date():
    before = datetime.now().strftime("%Y%m%d")
    number = generate_quote_number(1)
    after = datetime.now().strftime("%Y%m%d")
    assert number in (f"COT-{before}-0001", f"COT-{after}-0001")


@pytest.mark.parametrize("value", ["COT-20241221-0001", "COT-20240101-9999"])
def test_valid_quote_numbers(value):
    assert is_valid_quote_number(value)


@pytest.mark.parametrize(
    "value",
    [
        "COT-2024121-0001",
        "COT-2024122-10001",
        "COT_20241221-0001",
        "COT-20241221_0001",
        "COT20241221-00001",
        "COT-20241221-0001-",
        "COT-20241221-001",
        "QUOTE-20241221-0001",
        "COT-20241221",
        "",
        "invalid",
        "cot-20241221-0001",
        "COT-20241221-00011",
        " COT-20241221-0001",
        "COT-20241221-0001\n",
        "COT-２０２４1221-0001",
        None,
        12345,
    ],
)
def test_invalid_quote_numbers(value):
    assert not is_valid_quote_number(value)


def test_extract_date():
    assert extract_date_from_quote_number("COT-20241221-0001") == date(2024, 12, 21)
    assert extract_date_from_quote_number("COT-20240101-0001") == date(2024, 1, 1)


@pytest.mark.parametrize("value", ["invalid", "COT-2024121-0001", "COT-20241332-0001", "COT-20230229-0001"])
def test_extract_date_invalid(value):
    assert extract_date_from_quote_number(value) is None


def test_extract_sequence():
    assert extract_sequence_from_quote_number("COT-20241221-0001") == 1
    assert extract_sequence_from_quote_number("COT-20241221-0100") == 100
    assert extract_sequence_from_quote_number("COT-20241221-9999") == 9999
    assert extract_sequence_from_quote_number("invalid") is None


def test_generated_number_round_trips_through_extractors():
    number = generate_quote_number(42, now=FIXED)
    assert extract_date_from_quote_number(number) == FIXED.date()
    assert extract_sequence_from_quote_number(number) == 42


def test_access_token_shape_and_uniqueness():
    tokens = {generate_access_token() for _ in range(200)}
    assert len(tokens) == 200
    for token in tokens:
        assert len(token) == 32
        assert is_valid_access_token(token)


@pytest.mark.parametrize(
    "value",
    [
        "short",
        "abcdefghijklmnopqrstuvwxyz1234567",
        "abcdefghijklmnopqrstuvwxyz12345!",
        "abcdefghijklmnopqrstuvwxyz12345 ",
        "abcdefghijklmnopqrstuvwxyz12345é",
        "",
        None,
    ],
)
def test_invalid_access_tokens(value):
    assert not is_valid_access_token(value)


def test_valid_access_token():
    assert is_valid_access_token("abcdefghijklmnopqrstuvwxyz123456")
