"""
Unit tests for the shared validation utilities.

Covers the personal identity number checksum and birth date rules, the
license number format and the pagination policy.
"""

from datetime import date

import pytest

from clinic_records.core.exceptions import (
    InvalidLicenseNumberError,
    InvalidPersonalIdError,
    PaginationError,
    ValidationError,
)
from clinic_records.core.validation import (
    DEFAULT_PAGE_SIZE,
    Sex,
    birth_date_from_personal_id,
    paginate,
    personal_id_checksum,
    sex_from_personal_id,
    validate_license_number,
    validate_name,
    validate_personal_id,
)
from tests.config.test_config import TestData


@pytest.mark.unit
class TestPersonalIdValidation:
    """Test the 11-digit personal identity number validator."""

    @pytest.mark.parametrize("personal_id", TestData.VALID_PERSONAL_IDS)
    def test_valid_numbers_are_returned_unchanged(self, personal_id):
        assert validate_personal_id(personal_id) == personal_id

    @pytest.mark.parametrize(
        "value", ["", "9602180725", "960218072500", "9602180725a", " 96021807250", None, 96021807250]
    )
    def test_rejects_wrong_shape(self, value):
        with pytest.raises(InvalidPersonalIdError):
            validate_personal_id(value)

    def test_rejects_bad_checksum(self):
        with pytest.raises(InvalidPersonalIdError, match="checksum"):
            validate_personal_id(TestData.PERSONAL_ID_BAD_CHECKSUM)

    def test_rejects_month_thirteen_even_with_valid_checksum(self):
        value = TestData.PERSONAL_ID_MONTH_13
        assert int(value[10]) == personal_id_checksum(value)

        with pytest.raises(InvalidPersonalIdError, match="month"):
            validate_personal_id(value)

    def test_rejects_february_thirtieth_even_with_valid_checksum(self):
        value = TestData.PERSONAL_ID_FEBRUARY_30
        assert int(value[10]) == personal_id_checksum(value)

        with pytest.raises(InvalidPersonalIdError, match="birth date"):
            validate_personal_id(value)

    @pytest.mark.parametrize("personal_id", TestData.VALID_PERSONAL_IDS)
    def test_every_single_digit_change_is_rejected(self, personal_id):
        for position in range(11):
            for digit in "0123456789":
                if digit == personal_id[position]:
                    continue
                mutated = personal_id[:position] + digit + personal_id[position + 1 :]
                with pytest.raises(InvalidPersonalIdError):
                    validate_personal_id(mutated)

    def test_error_reports_the_given_field(self):
        with pytest.raises(InvalidPersonalIdError) as exc_info:
            validate_personal_id("123", field="patient_personal_id")

        assert exc_info.value.field == "patient_personal_id"
        assert isinstance(exc_info.value, ValidationError)

    def test_checksum_uses_weighted_sum(self):
        # 9*1 + 6*3 + 0*7 + 2*9 + 1*1 + 8*3 + 0*7 + 7*9 + 2*1 + 5*3 = 150
        assert personal_id_checksum("9602180725") == 0


@pytest.mark.unit
class TestPersonalIdDecoding:
    """Test the birth date and sex helpers."""

    @pytest.mark.parametrize(
        "personal_id, expected",
        [
            (TestData.PERSONAL_ID_1996, date(1996, 2, 18)),
            (TestData.PERSONAL_ID_1944, date(1944, 5, 14)),
            (TestData.PERSONAL_ID_1902, date(1902, 7, 8)),
            (TestData.PERSONAL_ID_2002, date(2002, 7, 8)),
            (TestData.PERSONAL_ID_LEAP_DAY, date(1992, 2, 29)),
        ],
    )
    def test_birth_date_includes_century_offset(self, personal_id, expected):
        assert birth_date_from_personal_id(personal_id) == expected

    def test_sex_from_tenth_digit(self):
        assert sex_from_personal_id(TestData.PERSONAL_ID_1996) == Sex.MALE
        assert sex_from_personal_id(TestData.PERSONAL_ID_1999) == Sex.FEMALE

    def test_helpers_validate_first(self):
        with pytest.raises(InvalidPersonalIdError):
            birth_date_from_personal_id(TestData.PERSONAL_ID_BAD_CHECKSUM)
        with pytest.raises(InvalidPersonalIdError):
            sex_from_personal_id(TestData.PERSONAL_ID_BAD_CHECKSUM)


@pytest.mark.unit
class TestLicenseNumberValidation:
    def test_accepts_seven_digits(self):
        assert validate_license_number(TestData.LICENSE_NUMBER) == TestData.LICENSE_NUMBER

    @pytest.mark.parametrize("value", ["", "542574", "54257401", "54a5740", "5425740 ", None])
    def test_rejects_anything_else(self, value):
        with pytest.raises(InvalidLicenseNumberError):
            validate_license_number(value)


@pytest.mark.unit
class TestNameValidation:
    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_rejects_blank(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_name(value)
        assert exc_info.value.field == "name"

    def test_accepts_text(self):
        assert validate_name("Anna") == "Anna"


@pytest.mark.unit
class TestPagination:
    """Test the (page, page_size) -> (limit, offset) policy."""

    def test_defaults(self):
        assert paginate() == (DEFAULT_PAGE_SIZE, 0)
        assert paginate(None, None) == (10, 0)

    def test_only_page_given(self):
        assert paginate(3) == (10, 30)

    def test_only_page_size_given(self):
        assert paginate(page_size=25) == (25, 0)

    def test_limit_and_offset_for_every_small_page(self):
        for page in range(0, 20):
            for page_size in range(1, 20):
                assert paginate(page, page_size) == (page_size, page * page_size)

    @pytest.mark.parametrize("page, page_size", [(-1, 10), (0, 0), (2, -5), (-3, None)])
    def test_rejects_out_of_range(self, page, page_size):
        with pytest.raises(PaginationError):
            paginate(page, page_size)
