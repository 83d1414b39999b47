"""Tests for validators, number generation and operation results"""

import re

import pytest

from app.shared import numbering
from app.shared.results import ErrorKind, OperationResult
from app.shared.validators import (
    normalize_colombian_phone,
    validate_document_number,
    validate_document_type,
    validate_time_token,
)

NUMBER_FORMAT = re.compile(r"^(APT|CLI)-\d{8}-[0-9A-F]{8}$")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3001234567", "+573001234567"),
        ("300 123 4567", "+573001234567"),
        ("(300) 123-4567", "+573001234567"),
        ("+57 300 123 4567", "+573001234567"),
        ("573001234567", "+573001234567"),
        ("8712345", None),
        ("", None),
        (None, None),
        ("300-abc-4567", None),
    ],
)
def test_normalize_colombian_phone(raw, expected):
    assert normalize_colombian_phone(raw) == expected


@pytest.mark.parametrize("value", ["9:05", "09:30", "23:59", "0:00"])
def test_valid_time_tokens(value):
    assert validate_time_token(value) == value


@pytest.mark.parametrize("value", ["24:00", "9:5", "0930", "12:60", ""])
def test_invalid_time_tokens(value):
    with pytest.raises(ValueError):
        validate_time_token(value)


def test_document_type_is_normalized_and_checked():
    assert validate_document_type("cc") == "CC"
    with pytest.raises(ValueError):
        validate_document_type("NIT")


def test_document_number_rules():
    assert validate_document_number(" AB123 ") == "AB123"
    with pytest.raises(ValueError):
        validate_document_number("12-34")
    with pytest.raises(ValueError):
        validate_document_number("1" * 21)


def test_generated_numbers_have_the_expected_shape():
    appointment_number = numbering.generate_appointment_number()
    client_number = numbering.generate_client_number()

    assert NUMBER_FORMAT.match(appointment_number)
    assert NUMBER_FORMAT.match(client_number)
    assert appointment_number.startswith(f"{numbering.APPOINTMENT_PREFIX}-")
    assert client_number.startswith(f"{numbering.CLIENT_PREFIX}-")


def test_generated_numbers_do_not_repeat():
    numbers = {numbering.generate_appointment_number() for _ in range(500)}

    assert len(numbers) == 500


def test_operation_result_invariants():
    with pytest.raises(ValueError):
        OperationResult(is_success=True, error="nope")
    with pytest.raises(ValueError):
        OperationResult(is_success=False)

    failure = OperationResult.failure("Branch gone", ErrorKind.UNAVAILABLE)
    assert failure.http_status == 503
    assert OperationResult.success({"id": 1}).http_status == 200
