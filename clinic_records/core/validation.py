"""
Shared validation utilities for clinic records.

Every entity constructor and paginated listing goes through this module so
identity numbers and pagination parameters are checked the same way
everywhere:

- validate_personal_id: 11-digit national identity number (PESEL layout)
  with weighted checksum and embedded birth date
- validate_license_number: 7-digit professional license number
- paginate: (page, page_size) -> (limit, offset)
"""

import logging
import re
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from clinic_records.core.exceptions import (
    InvalidLicenseNumberError,
    InvalidPersonalIdError,
    PaginationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PERSONAL_ID_LENGTH = 11
PERSONAL_ID_WEIGHTS = (1, 3, 7, 9, 1, 3, 7, 9, 1, 3)
LICENSE_NUMBER_LENGTH = 7

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10

# Month offset -> first year of the encoded century
_CENTURY_BY_MONTH_OFFSET = {80: 1800, 0: 1900, 20: 2000, 40: 2100, 60: 2200}

_PERSONAL_ID_PATTERN = re.compile(r"[0-9]{11}")
_LICENSE_NUMBER_PATTERN = re.compile(r"[0-9]{7}")


class Sex(str, Enum):
    FEMALE = "female"
    MALE = "male"


def personal_id_checksum(digits: str) -> int:
    """Return the expected control digit for the first ten digits."""
    total = sum(int(d) * w for d, w in zip(digits[:10], PERSONAL_ID_WEIGHTS))
    return (10 - total % 10) % 10


def _decode_birth_date(value: str) -> date:
    encoded_month = int(value[2:4])
    offset = (encoded_month // 20) * 20
    century = _CENTURY_BY_MONTH_OFFSET.get(offset)
    month = encoded_month - offset
    if century is None or not 1 <= month <= 12:
        raise InvalidPersonalIdError(
            f"Personal identity number {value} encodes an invalid birth month"
        )
    try:
        return date(century + int(value[0:2]), month, int(value[4:6]))
    except ValueError as exc:
        raise InvalidPersonalIdError(
            f"Personal identity number {value} encodes an invalid birth date"
        ) from exc


def validate_personal_id(value: str, field: str = "personal_id") -> str:
    """
    Validate a national personal identity number.

    Args:
        value: Candidate number as a string
        field: Field name reported on failure

    Returns:
        The validated number, unchanged

    Raises:
        InvalidPersonalIdError: wrong length, non-digit characters,
            checksum mismatch or an impossible embedded birth date
    """
    if not isinstance(value, str) or len(value) != PERSONAL_ID_LENGTH:
        raise InvalidPersonalIdError(
            f"Personal identity number must be exactly {PERSONAL_ID_LENGTH} digits",
            field,
        )
    if not _PERSONAL_ID_PATTERN.fullmatch(value):
        raise InvalidPersonalIdError(
            "Personal identity number must contain only digits", field
        )
    if int(value[10]) != personal_id_checksum(value):
        raise InvalidPersonalIdError(
            f"Personal identity number {value} has an invalid checksum", field
        )
    try:
        _decode_birth_date(value)
    except InvalidPersonalIdError as exc:
        raise InvalidPersonalIdError(exc.message, field) from exc
    return value


def birth_date_from_personal_id(value: str) -> date:
    """Decode the birth date embedded in a valid personal identity number."""
    return _decode_birth_date(validate_personal_id(value))


def sex_from_personal_id(value: str) -> Sex:
    """Decode the sex embedded in a valid personal identity number."""
    validate_personal_id(value)
    return Sex.MALE if int(value[9]) % 2 else Sex.FEMALE


def validate_license_number(value: str, field: str = "license_number") -> str:
    """Validate a 7-digit professional license number (format only)."""
    if not isinstance(value, str) or not _LICENSE_NUMBER_PATTERN.fullmatch(value):
        raise InvalidLicenseNumberError(
            f"License number must be exactly {LICENSE_NUMBER_LENGTH} digits", field
        )
    return value


def validate_name(value: str, field: str = "name") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field)
    return value


def paginate(
    page: Optional[int] = None, page_size: Optional[int] = None
) -> Tuple[int, int]:
    """
    Translate optional page parameters into a (limit, offset) pair.

    Args:
        page: Zero-based page index, defaults to 0
        page_size: Items per page, defaults to 10

    Returns:
        (limit, offset) where limit == page_size and offset == page * page_size

    Raises:
        PaginationError: page < 0 or page_size < 1
    """
    page = DEFAULT_PAGE if page is None else page
    page_size = DEFAULT_PAGE_SIZE if page_size is None else page_size
    if page < 0 or page_size < 1:
        logger.warning(
            "Rejected pagination parameters",
            extra={"context": {"page": page, "page_size": page_size}},
        )
        raise PaginationError()
    return page_size, page * page_size
