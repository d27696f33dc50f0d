"""Tests for product field validation."""

import pytest

from src.core.entities.product import Product
from src.core.exceptions import ValidationError
from src.core.services import TEXT_LIMITS, validate_product, validate_text


def valid_product(**overrides) -> Product:
    fields = {
        "sku": "BRG-6204",
        "name": "Ball bearing 6204",
        "category": "Bearings",
        "unit_of_measure": "ea",
        "location": "A-01-03",
        "reorder_point": 5,
        "reorder_quantity": 20,
        "unit_cost": 3.75,
    }
    fields.update(overrides)
    return Product(**fields)


class TestValidateText:
    def test_strips_whitespace(self):
        assert validate_text("sku", "  BRG-1  ") == "BRG-1"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_text("unit_of_measure", value)
        assert exc_info.value.details["field"] == "unit_of_measure"
        assert exc_info.value.details["message"] == "Unit of measure is required"

    @pytest.mark.parametrize("field, limit", sorted(TEXT_LIMITS.items()))
    def test_length_limits(self, field, limit):
        assert validate_text(field, "x" * limit) == "x" * limit
        with pytest.raises(ValidationError) as exc_info:
            validate_text(field, "x" * (limit + 1))
        assert exc_info.value.details["message"] == f"Cannot exceed {limit} characters"


class TestValidateProduct:
    def test_valid_product_is_cleaned_copy(self):
        product = valid_product(name="  Bearing  ")
        cleaned = validate_product(product)
        assert cleaned.name == "Bearing"
        assert product.name == "  Bearing  "

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"sku": ""}, "sku"),
            ({"category": " "}, "category"),
            ({"location": ""}, "location"),
            ({"reorder_point": -1}, "reorder_point"),
            ({"reorder_quantity": 0}, "reorder_quantity"),
            ({"unit_cost": 0}, "unit_cost"),
            ({"unit_cost": -2.0}, "unit_cost"),
        ],
    )
    def test_invalid_fields(self, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            validate_product(valid_product(**overrides))
        assert exc_info.value.details["field"] == field

    def test_zero_reorder_point_is_allowed(self):
        assert validate_product(valid_product(reorder_point=0)).reorder_point == 0
