"""Identifier Encoder

Builds the 45 character unique document identifier (IUD):

    CC R YY MM DD NNNNNNNNN LLLLL TT SSSSSSSSS XXXXXXXXXX D
    |  | |        |         |     |  |         |          check digit
    |  | |        |         |     |  |         random component (frozen)
    |  | |        |         |     |  internal sequence number
    |  | |        |         |     document type code
    |  | |        |         LED (device/location) code
    |  | |        issuer tax id
    |  | document date
    |  repository code
    country code
"""

import secrets
from datetime import date
from src.domain.document_type import DocumentType
from src.domain.errors import IdentifierEncodingError
from src.domain.fiscal_document import FiscalDocument
from src.domain.fiscal_settings import FiscalSettings

IUD_LENGTH = 45
RANDOM_CODE_LENGTH = 10

_RANDOM_LOW = 10 ** (RANDOM_CODE_LENGTH - 1)
_RANDOM_SPAN = 9 * _RANDOM_LOW


def check_digit(base: str) -> str:
    """
    Check digit over the numeric base (fields 2 to 10)

    Digits at even 0-based positions count once, odd positions twice
    (minus 9 when the product exceeds 9); the digit is (sum * 9) mod 10.
    """
    total = 0
    for index, char in enumerate(base):
        product = int(char) * (1 if index % 2 == 0 else 2)
        if product > 9:
            product -= 9
        total += product
    return str((total * 9) % 10)


def generate_random_code() -> str:
    """10 digit random component, never starting with 0"""
    return str(_RANDOM_LOW + secrets.randbelow(_RANDOM_SPAN))


def _digits(value, width: int, name: str) -> str:
    text = str(value)
    if not text.isdigit():
        raise IdentifierEncodingError(f"{name} must be numeric, got {text!r}")
    if len(text) > width:
        raise IdentifierEncodingError(f"{name} does not fit in {width} digits: {text}")
    return text.zfill(width)


def build_iud(
    settings: FiscalSettings,
    document_date: date,
    document_type: DocumentType,
    sequence_number: int,
    random_code: str,
) -> str:
    """Assemble the identifier from explicit fields"""
    if len(random_code) != RANDOM_CODE_LENGTH:
        raise IdentifierEncodingError(f"random_code must be {RANDOM_CODE_LENGTH} digits")

    base = "".join((
        _digits(settings.repository_code, 1, "repository_code"),
        _digits(document_date.year % 100, 2, "year"),
        _digits(document_date.month, 2, "month"),
        _digits(document_date.day, 2, "day"),
        _digits(settings.issuer_tax_id, 9, "issuer_tax_id"),
        _digits(settings.led_code, 5, "led_code"),
        document_type.type_code,
        _digits(sequence_number, 9, "sequence_number"),
        _digits(random_code, RANDOM_CODE_LENGTH, "random_code"),
    ))
    return f"{settings.country_code}{base}{check_digit(base)}"


def encode_iud(document: FiscalDocument, settings: FiscalSettings) -> str:
    """
    Encode the identifier of a document whose sequence is reserved

    Pure in its inputs: the random component is read from the document,
    where it was stored together with the sequence number.

    Raises:
        IdentifierEncodingError: no reservation, or a field overflows
    """
    if document.sequence_number is None or not document.random_code:
        raise IdentifierEncodingError(
            "Sequence number must be allocated before the identifier is generated"
        )
    return build_iud(
        settings,
        document.document_date,
        document.document_type,
        document.sequence_number,
        document.random_code,
    )


def verify_iud(iud: str) -> bool:
    """Length, shape and check digit of an identifier"""
    if len(iud) != IUD_LENGTH:
        return False
    country, base, digit = iud[:2], iud[2:-1], iud[-1]
    if not country.isalpha() or not base.isdigit() or not digit.isdigit():
        return False
    return check_digit(base) == digit


def format_display_id(document_type: DocumentType, series: str, year: int, sequence_number: int) -> str:
    """Human readable identifier, e.g. ``FTE A2024/007``"""
    return f"{document_type.value} {series}{year}/{sequence_number:03d}"
