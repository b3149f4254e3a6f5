"""Unit tests for numeric parsing and action-type normalization."""
import pytest

from src.adlens_core.metrics.parsing import (
    extract_entry_total,
    format_result_label,
    normalize_action_type,
    parse_number,
    parse_percent_to_number,
)
from src.adlens_core.schemas.graph import ActionEntry


def _entry(**fields) -> ActionEntry:
    return ActionEntry.model_validate({"action_type": "lead", **fields})


def test_parse_number_accepts_strings_and_numbers():
    """Test Graph numeric strings and plain numbers."""
    assert parse_number("12.5") == 12.5
    assert parse_number(3) == 3.0


@pytest.mark.parametrize("raw", [None, "", "abc", "nan", "inf", True, {}])
def test_parse_number_invalid_is_zero(raw):
    """Test absent, invalid and non-finite values count as zero."""
    assert parse_number(raw) == 0.0


def test_parse_percent_to_number():
    """Test percentage strings become fractions."""
    assert parse_percent_to_number("2.5") == pytest.approx(0.025)
    assert parse_percent_to_number(None) is None
    assert parse_percent_to_number("n/a") is None


def test_normalize_action_type():
    """Test trimming and lower-casing; empty types are dropped."""
    assert normalize_action_type("  Onsite_Conversion.Lead ") == "onsite_conversion.lead"
    assert normalize_action_type("   ") is None
    assert normalize_action_type(None) is None


def test_format_result_label_table_lookup():
    """Test labels from the static table."""
    assert format_result_label("lead") == "Leads"
    assert format_result_label("leadgen_qualified_lead") == "Leads qualificados"
    assert format_result_label("PURCHASE") == "Compras"


def test_format_result_label_title_cases_unknown_types():
    """Test unknown types render as title-cased words."""
    assert format_result_label("onsite_conversion.custom_event") == "Onsite Conversion Custom Event"


def test_format_result_label_default():
    """Test missing type renders the default label."""
    assert format_result_label(None) == "Resultados"


def test_extract_entry_total_direct_value():
    """Test direct value wins when positive."""
    assert extract_entry_total(_entry(value="5", **{"7d_click": "9"})) == 5.0


def test_extract_entry_total_attribution_windows():
    """Test window sum is used when value is missing or zero."""
    entry = _entry(value="0", **{"7d_click": "2", "1d_view": "1"})

    assert extract_entry_total(entry) == 3.0


def test_extract_entry_total_other_numeric_fields():
    """Test last resort sums any other numeric-looking field."""
    entry = _entry(**{"28d_click": "4", "28d_view": "1.5", "label": "x"})

    assert extract_entry_total(entry) == 5.5


def test_extract_entry_total_never_negative():
    """Test negative inputs are clamped to zero."""
    assert extract_entry_total(_entry(value="-3")) == 0.0
    assert extract_entry_total(_entry(**{"28d_click": "-2"})) == 0.0


def test_extract_entry_total_is_deterministic():
    """Test repeated extraction of the same entry yields the same number."""
    entry = _entry(**{"7d_click": "2", "1d_click": "1", "7d_view": "0.5"})

    assert extract_entry_total(entry) == extract_entry_total(entry) == 3.5
