"""Tests for the protocol vocabularies."""

from trinoduck.protocol import error_codes, headers


def test_error_codes_match_their_type():
    for name, (_, error_type) in error_codes.ERROR_CODES.items():
        if name == "DUCKDB_IO_ERROR":
            continue
        assert error_codes.error_type_of(name) == error_type


def test_standard_codes():
    assert error_codes.ERROR_CODES["USER_CANCELED"] == (3, "USER_ERROR")
    assert error_codes.ERROR_CODES["TABLE_NOT_FOUND"] == (46, "USER_ERROR")
    assert error_codes.ERROR_CODES["GENERIC_INTERNAL_ERROR"] == (65536, "INTERNAL_ERROR")


def test_error_type_of_unknown_name():
    assert error_codes.error_type_of("NOT_A_REAL_ERROR") is None


def test_header_names_are_lower_case():
    for name in headers.REQUEST_HEADERS | headers.RESPONSE_HEADERS:
        assert name == name.lower()
        assert name.startswith(headers.PREFIX)
