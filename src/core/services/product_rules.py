"""
Product field rules.

Checked on registration and on every descriptive update. Each rule raises
ValidationError naming the offending field; the first failure wins.
"""

from src.core.entities.product import Product
from src.core.exceptions import ValidationError

# field -> max length; all of these are required
TEXT_LIMITS: dict[str, int] = {
    "sku": 50,
    "name": 200,
    "category": 100,
    "unit_of_measure": 20,
    "location": 100,
}


def validate_text(field: str, value: str | None) -> str:
    """Strip, require, and bound one text field."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field, f"{field.replace('_', ' ').capitalize()} is required")
    limit = TEXT_LIMITS[field]
    if len(cleaned) > limit:
        raise ValidationError(field, f"Cannot exceed {limit} characters", cleaned)
    return cleaned


def validate_product(product: Product) -> Product:
    """Return a copy with text fields stripped, or raise on the first bad field."""
    cleaned = {field: validate_text(field, getattr(product, field)) for field in TEXT_LIMITS}

    if product.quantity < 0:
        raise ValidationError("quantity", "Current stock cannot be negative", product.quantity)
    if product.reorder_point < 0:
        raise ValidationError("reorder_point", "Reorder point cannot be negative", product.reorder_point)
    if product.reorder_quantity <= 0:
        raise ValidationError(
            "reorder_quantity", "Reorder quantity must be greater than zero", product.reorder_quantity
        )
    if product.unit_cost <= 0:
        raise ValidationError("unit_cost", "Unit cost must be greater than zero", product.unit_cost)

    return product.model_copy(update=cleaned)
