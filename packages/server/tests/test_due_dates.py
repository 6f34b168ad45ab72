"""
Due date parsing and the today/overdue comparisons behind the dashboard.

Due dates are Jalali strings, either one day ("1403/07/01") or an
inclusive range ("1403/07/01 - 1403/07/05").
"""

import pytest
from pydantic import ValidationError

from app.core import jalali
from daftar_shared.schemas.tasks import TaskUpdate, normalize_digits, normalize_due_date


class TestNormalizeDueDate:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1403/07/01", "1403/07/01"),
            ("1403/7/1", "1403/07/01"),
            ("۱۴۰۳/۰۷/۰۱", "1403/07/01"),
            ("١٤٠٣/٧/١", "1403/07/01"),
            (" 1403/07/01 ", "1403/07/01"),
            ("1403/07/01 - 1403/07/05", "1403/07/01 - 1403/07/05"),
            ("1403/07/01-1403/7/5", "1403/07/01 - 1403/07/05"),
            ("۱۴۰۳/۰۶/۳۰ - ۱۴۰۳/۰۷/۰۲", "1403/06/30 - 1403/07/02"),
        ],
    )
    def test_accepted_forms(self, raw, expected):
        assert normalize_due_date(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "tomorrow",
            "1403-07-01",
            "03/07/01",
            "1403/13/01",
            "1403/00/10",
            "1403/07/32",
            "1403/07/05 - 1403/07/01",
            "1403/07/01 - 1403/07/02 - 1403/07/03",
        ],
    )
    def test_rejected_forms(self, raw):
        with pytest.raises(ValueError):
            normalize_due_date(raw)

    def test_normalize_digits(self):
        assert normalize_digits("۱۲۳ ٤٥٦ 789") == "123 456 789"


class TestTaskUpdateDueDate:
    def test_blank_clears(self):
        assert TaskUpdate(due_date="  ").due_date is None

    def test_normalized_on_input(self):
        assert TaskUpdate(due_date="۱۴۰۳/۷/۱").due_date == "1403/07/01"

    def test_invalid_rejected(self):
        with pytest.raises(ValidationError):
            TaskUpdate(due_date="next week")


class TestCalendarValidation:
    def test_leap_esfand(self):
        assert jalali.validate_due_date("1403/12/30") == "1403/12/30"

    def test_non_leap_esfand(self):
        with pytest.raises(ValueError):
            jalali.validate_due_date("1402/12/30")

    def test_autumn_month_has_30_days(self):
        with pytest.raises(ValueError):
            jalali.validate_due_date("1403/07/31")

    def test_range_checks_both_ends(self):
        with pytest.raises(ValueError):
            jalali.validate_due_date("1403/07/01 - 1403/07/31")

    def test_parse_date_rejects_range(self):
        with pytest.raises(ValueError):
            jalali.parse_date("1403/07/01 - 1403/07/02")


class TestDueComparisons:
    def test_parse_due_date(self):
        assert jalali.parse_due_date("1403/07/01") == ("1403/07/01", "1403/07/01")
        assert jalali.parse_due_date("1403/07/01 - 1403/07/05") == ("1403/07/01", "1403/07/05")
        assert jalali.parse_due_date(None) is None
        assert jalali.parse_due_date("garbage") is None

    def test_single_day(self):
        assert jalali.is_due_on("1403/07/01", "1403/07/01")
        assert not jalali.is_due_on("1403/07/01", "1403/07/02")

    def test_range_is_inclusive(self):
        due = "1403/07/01 - 1403/07/05"
        assert jalali.is_due_on(due, "1403/07/01")
        assert jalali.is_due_on(due, "1403/07/03")
        assert jalali.is_due_on(due, "1403/07/05")
        assert not jalali.is_due_on(due, "1403/07/06")

    def test_overdue_uses_range_start(self):
        due = "1403/07/01 - 1403/07/05"
        assert not jalali.is_overdue(due, "1403/07/01")
        assert jalali.is_overdue(due, "1403/07/03")
        assert jalali.is_overdue(due, "1403/07/06")

    def test_overdue_across_months(self):
        assert jalali.is_overdue("1403/06/31", "1403/07/01")
        assert not jalali.is_overdue("1403/07/01", "1403/06/31")

    def test_missing_or_malformed_is_neither(self):
        for due in (None, "", "someday"):
            assert not jalali.is_due_on(due, "1403/07/01")
            assert not jalali.is_overdue(due, "1403/07/01")
