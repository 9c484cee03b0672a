"""
Tests for validation and payload normalization functions.

Run with: pytest tests/test_validation.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.errors import ValidationError
from core.validation import (
    coerce_number,
    coerce_print_kind,
    coerce_sequence_number,
    normalize_strings_upper,
    parse_payload,
    require_text,
)
from schemas.order import OrderCreate


class TestNormalizeStringsUpper:
    """Tests for recursive upper-casing."""

    def test_nested_values(self):
        payload = {"vendor": "acme glass", "items": [{"description": "1/4 clear"}], "qty": 3}
        out = normalize_strings_upper(payload)
        assert out == {"vendor": "ACME GLASS", "items": [{"description": "1/4 CLEAR"}], "qty": 3}

    def test_identifier_keys_untouched(self):
        out = normalize_strings_upper({"orderId": "order_1_abc", "id": "po-1-xyz", "note": "x"})
        assert out["orderId"] == "order_1_abc"
        assert out["id"] == "po-1-xyz"
        assert out["note"] == "X"

    def test_non_strings_pass_through(self):
        assert normalize_strings_upper(None) is None
        assert normalize_strings_upper(True) is True
        assert normalize_strings_upper(1.5) == 1.5

    def test_input_not_mutated(self):
        payload = {"vendor": "acme"}
        normalize_strings_upper(payload)
        assert payload["vendor"] == "acme"


class TestParsePayload:
    """Tests for schema validation of request bodies."""

    def test_unknown_keys_dropped(self):
        body = parse_payload(OrderCreate, {"status": "completed", "isAdmin": True})
        assert body.status == "completed"
        assert "isAdmin" not in body.model_dump()

    def test_non_object_rejected(self):
        with pytest.raises(ValidationError) as exc:
            parse_payload(OrderCreate, ["not", "a", "dict"])
        assert exc.value.status_code == 400

    def test_bad_type_rejected(self):
        with pytest.raises(ValidationError) as exc:
            parse_payload(OrderCreate, {"items": "nope"})
        assert "items" in exc.value.message


class TestRequireText:

    def test_returns_stripped(self):
        assert require_text("  hello ", "missing") == "hello"

    def test_blank_raises_with_message(self):
        with pytest.raises(ValidationError) as exc:
            require_text("   ", "Description is required")
        assert exc.value.message == "Description is required"

    def test_none_raises(self):
        with pytest.raises(ValidationError):
            require_text(None, "missing")


class TestCoercion:
    """Tests for loose numeric coercion."""

    @pytest.mark.parametrize("value,expected", [
        (5, 5.0),
        ("12.5", 12.5),
        (" 3 ", 3.0),
        (None, 0.0),
        ("abc", 0.0),
        (True, 0.0),
        (float("nan"), 0.0),
    ])
    def test_coerce_number(self, value, expected):
        assert coerce_number(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (1042, 1042),
        ("1042", 1042),
        (0, None),
        (-3, None),
        (12.5, None),
        ("x", None),
        (None, None),
    ])
    def test_coerce_sequence_number(self, value, expected):
        assert coerce_sequence_number(value) == expected


class TestCoercePrintKind:

    @pytest.mark.parametrize("kind,expected", [
        ("quote", "quote"),
        ("TICKET", "ticket"),
        ("packinglist", "packing-list"),
        ("Packing-List", "packing-list"),
        ("po", "purchase-order"),
        ("purchaseorder", "purchase-order"),
        ("invoice", "invoice"),
    ])
    def test_aliases(self, kind, expected):
        assert coerce_print_kind(kind) == expected

    def test_unknown_kind(self):
        with pytest.raises(ValidationError) as exc:
            coerce_print_kind("receipt")
        assert exc.value.message == "Invalid print type"
