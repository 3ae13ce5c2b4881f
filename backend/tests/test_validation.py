"""Request parsing and money conversion."""

import pytest

from shoppos.money import format_cents, to_cents
from shoppos.validation import (
    MAX_CART_LINES,
    CartLine,
    ValidationError,
    coerce_int,
    parse_payment_method,
    parse_sale_request,
)


class TestParseSaleRequest:
    def test_valid_request(self):
        request = parse_sale_request({
            "items": [{"product_id": 2, "quantity": 1}, {"productId": "5", "quantity": "3"}],
            "payment_method": " Mobile ",
        })

        assert request.lines == (CartLine(2, 1), CartLine(5, 3))
        assert request.payment_method == "Mobile"

    @pytest.mark.parametrize("payload, message", [
        (None, "Invalid JSON payload"),
        ([], "Invalid JSON payload"),
        ({}, "Sale must have at least one item"),
        ({"items": []}, "Sale must have at least one item"),
        ({"items": "abc"}, "items must be a list"),
        ({"items": [3]}, "items[0] must be an object"),
        ({"items": [{"quantity": 1}]}, "items[0].product_id is required"),
        ({"items": [{"product_id": 1}]}, "items[0].quantity is required"),
        ({"items": [{"product_id": 1, "quantity": 1}, {"product_id": 1, "quantity": 0}]},
         "items[1].quantity must be a positive integer"),
        ({"items": [{"product_id": -4, "quantity": 1}]}, "items[0].product_id must be a positive integer"),
    ])
    def test_rejects(self, payload, message):
        with pytest.raises(ValidationError) as exc_info:
            parse_sale_request(payload)
        assert str(exc_info.value) == message
        assert exc_info.value.status_code == 400

    def test_cart_size_limit(self):
        items = [{"product_id": 1, "quantity": 1}] * (MAX_CART_LINES + 1)
        with pytest.raises(ValidationError):
            parse_sale_request({"items": items})


class TestPaymentMethod:
    @pytest.mark.parametrize("raw, expected", [
        (None, "Cash"),
        ("", "Cash"),
        ("   ", "Cash"),
        ("Card", "Card"),
        ("card", "Card"),
        ("Gift Card", "Gift Card"),
    ])
    def test_normalizes(self, raw, expected):
        assert parse_payment_method(raw) == expected

    def test_rejects_non_string_and_long_values(self):
        with pytest.raises(ValidationError):
            parse_payment_method(12)
        with pytest.raises(ValidationError):
            parse_payment_method("x" * 33)


class TestCoerceInt:
    def test_accepts_ints_and_digit_strings(self):
        assert coerce_int(4, "q") == 4
        assert coerce_int(" 12 ", "q") == 12

    @pytest.mark.parametrize("value", [True, 1.0, "1.0", "1e2", "", "abc", None])
    def test_rejects(self, value):
        with pytest.raises(ValidationError):
            coerce_int(value, "q")


class TestMoney:
    @pytest.mark.parametrize("value, cents", [
        ("1.50", 150),
        ("0.1", 10),
        (0.1, 10),
        (2, 200),
        ("19.99", 1999),
        ("0", 0),
    ])
    def test_to_cents(self, value, cents):
        assert to_cents(value) == cents

    @pytest.mark.parametrize("value", ["1.005", "abc", "", "NaN", "1e2", True, None, [1]])
    def test_to_cents_rejects(self, value):
        with pytest.raises(ValidationError):
            to_cents(value)

    def test_format_cents(self):
        assert format_cents(450) == "4.50"
        assert format_cents(0) == "0.00"
        assert format_cents(5) == "0.05"
        assert format_cents(None) is None
