"""Format checkers for Iranian identifiers and common text formats.

Every checker is a plain predicate, over a string for the text formats and
over bytes or a seekable binary file for the file rules. They are registered as
engine rules by the options in ``transvalid.options``.

Checkers:
    is_valid_username: letters, digits and underscores
    is_alpha_numeric: English letters and digits
    is_alpha_numeric_with_persian: English/Persian letters and digits
    is_valid_iranian_phone: 11 digit landline or mobile number (تلفن)
    is_valid_iranian_mobile: 11 digit mobile number (موبایل)
    is_valid_iranian_postal_code: 10 digit postal code (کد پستی)
    is_valid_iranian_id_number: birth certificate number (شماره شناسنامه)
    is_valid_iranian_national_code: national ID with checksum (کد ملی)
    is_valid_iranian_bank_card: 16 digit card number with Luhn check
    is_valid_iranian_iban: IR IBAN (شبا) with mod-97 check
    is_valid_ip / is_valid_ip_port: IPv4/IPv6 address, ``ip:port``
    is_valid_jalaali_date: Jalaali (Solar Hijri) date or datetime string
    is_valid_file_size / is_valid_file_type: uploaded content size and MIME
"""

from __future__ import annotations

import io
import ipaddress
import re
from typing import Any, BinaryIO, Union

import filetype
import jdatetime


_USERNAME_RE = re.compile(r"[a-zA-Z0-9_]+")
_PHONE_RE = re.compile(r"0[1-9][0-9]{9}")
_MOBILE_RE = re.compile(r"09[0-9]{9}")
_POSTAL_CODE_RE = re.compile(r"[0-9]{10}")
_ID_NUMBER_RE = re.compile(r"[0-9]{1,10}")
_NATIONAL_CODE_RE = re.compile(r"[0-9]{10}")
_BANK_CARD_RE = re.compile(r"[0-9]{16}")
_IBAN_RE = re.compile(r"IR[0-9]{24}")

_ENGLISH_ALNUM = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
_PERSIAN_LETTERS = frozenset(
    [chr(c) for c in range(0x0621, 0x063B)]     # ء..غ
    + [chr(c) for c in range(0x0641, 0x064B)]   # ف..ي
    + ["پ", "چ", "ژ", "ک", "گ", "ی"]
    + [chr(c) for c in range(0x06F0, 0x06FA)]   # ۰..۹
)

# IR -> 18 27
_IR_DIGITS = "1827"


def is_valid_username(username: str) -> bool:
    """Check that a username only has letters, digits and underscores."""
    return bool(_USERNAME_RE.fullmatch(username))


def is_alpha_numeric(value: str, *extra: str) -> bool:
    """Check that value only has English letters, digits and extra chars.

    Args:
        value: String to check
        *extra: Additional allowed characters

    Returns:
        True if every character is allowed and value is not empty
    """
    if not value:
        return False
    allowed = _ENGLISH_ALNUM.union(extra)
    return all(ch in allowed for ch in value)


def is_alpha_numeric_with_persian(value: str, *extra: str) -> bool:
    """Like ``is_alpha_numeric`` but also accepts Persian letters and digits."""
    if not value:
        return False
    allowed = _ENGLISH_ALNUM.union(_PERSIAN_LETTERS, extra)
    return all(ch in allowed for ch in value)


def is_valid_iranian_phone(phone: str) -> bool:
    return bool(_PHONE_RE.fullmatch(phone))


def is_valid_iranian_mobile(mobile: str) -> bool:
    return bool(_MOBILE_RE.fullmatch(mobile))


def is_valid_iranian_postal_code(postal_code: str) -> bool:
    return bool(_POSTAL_CODE_RE.fullmatch(postal_code))


def is_valid_iranian_id_number(id_number: str) -> bool:
    return bool(_ID_NUMBER_RE.fullmatch(id_number))


def is_valid_iranian_national_code(national_code: str) -> bool:
    """Validate an Iranian national ID number (کد ملی).

    Format: 10 digits, the last one is a check digit.
    The first nine digits are weighted 10..2; with ``r = sum % 11`` the
    check digit is ``r`` when ``r < 2`` and ``11 - r`` otherwise.

    Args:
        national_code: National code (digits only)

    Returns:
        True if valid, False otherwise
    """
    if not _NATIONAL_CODE_RE.fullmatch(national_code):
        return False

    digits = [int(d) for d in national_code]
    total = sum(d * (10 - i) for i, d in enumerate(digits[:9]))
    remainder = total % 11

    if remainder < 2:
        return digits[9] == remainder
    return digits[9] == 11 - remainder


def is_valid_iranian_bank_card(card_number: str) -> bool:
    """Validate a 16 digit bank card number with the Luhn algorithm.

    Args:
        card_number: Card number (digits only)

    Returns:
        True if valid, False otherwise
    """
    if not _BANK_CARD_RE.fullmatch(card_number):
        return False

    total = 0
    for i, ch in enumerate(reversed(card_number)):
        n = int(ch)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n

    return total % 10 == 0


def is_valid_iranian_iban(iban: str) -> bool:
    """Validate an Iranian IBAN (شبا), with or without the ``IR`` prefix.

    Format: ``IR`` + 2 check digits + 22 digit BBAN.
    The country code and check digits are moved to the end, letters are
    replaced by numbers (I=18, R=27) and the result must be 1 modulo 97
    (ISO 7064 MOD 97-10).

    Args:
        iban: IBAN string

    Returns:
        True if valid, False otherwise
    """
    if not iban.startswith("IR"):
        iban = "IR" + iban

    if not _IBAN_RE.fullmatch(iban):
        return False

    rearranged = iban[4:] + _IR_DIGITS + iban[2:4]
    return int(rearranged) % 97 == 1


def is_valid_ip(ip: str) -> bool:
    """Check for a valid IPv4 or IPv6 address."""
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return False
    return True


def is_valid_ip_port(ip_port: str) -> bool:
    """Check an ``ip:port`` pair with a port between 1 and 65535."""
    parts = ip_port.split(":")
    if len(parts) != 2:
        return False

    ip, port = parts
    if not is_valid_ip(ip):
        return False

    if not re.fullmatch(r"[0-9]{1,5}", port):
        return False
    return 1 <= int(port) <= 65535


# ISO 8601 datetime first, then a plain date
DEFAULT_JALAALI_LAYOUTS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d")

# Reported by is_valid_file_type when the content matches no known signature
UNKNOWN_MIME = "application/octet-stream"

# Leading bytes handed to the signature matcher
_SIGNATURE_SIZE = 8192

FileContent = Union[bytes, bytearray, memoryview, BinaryIO]


def is_valid_jalaali_date(value: str, layout: str = "") -> bool:
    """Check that value is a real Jalaali date in the given strftime layout.

    Args:
        value: Date string, e.g. ``"1402-12-29"``
        layout: ``strftime`` layout such as ``"%Y/%m/%d"``; ISO 8601 datetime
            or date when empty

    Returns:
        True if the string parses to an existing Jalaali date
    """
    layouts = (layout,) if layout else DEFAULT_JALAALI_LAYOUTS
    for candidate in layouts:
        try:
            jdatetime.datetime.strptime(value, candidate)
        except ValueError:
            continue
        return True
    return False


def is_file_content(file: Any) -> bool:
    """Check for content the file rules can measure: bytes or a seekable binary file."""
    if isinstance(file, (bytes, bytearray, memoryview)):
        return True
    return all(hasattr(file, name) for name in ("read", "seek", "tell"))


def file_size(file: FileContent) -> int:
    """Size of in-memory content or of a seekable file, keeping its position."""
    if isinstance(file, memoryview):
        return file.nbytes
    if isinstance(file, (bytes, bytearray)):
        return len(file)

    position = file.tell()
    try:
        return file.seek(0, io.SEEK_END)
    finally:
        file.seek(position)


def is_valid_file_size(file: FileContent, min_size: int, max_size: int) -> bool:
    """Check that the content size is between min_size and max_size bytes (inclusive)."""
    return min_size <= file_size(file) <= max_size


def detect_mime(file: FileContent) -> str:
    """Sniff the MIME type of content from its leading bytes."""
    if isinstance(file, (bytes, bytearray, memoryview)):
        head = bytes(file[:_SIGNATURE_SIZE])
    else:
        position = file.tell()
        try:
            file.seek(0)
            head = file.read(_SIGNATURE_SIZE)
        finally:
            file.seek(position)

    kind = filetype.guess(head)
    if kind is None:
        return UNKNOWN_MIME
    return kind.mime


def is_valid_file_type(file: FileContent, *mimes: str) -> bool:
    """Check the sniffed MIME type against the allowed ones (case-insensitive).

    Content without a known signature is reported as
    ``application/octet-stream``.
    """
    detected = detect_mime(file).lower()
    return any(detected == mime.strip().lower() for mime in mimes)
