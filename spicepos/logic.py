import json
import logging
import math
from typing import Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from .core import Flash, ProductIn, ProductUpdate
from .inventory import ProductStore
from .models import LineItem
from .sales import SalesStore

logger = logging.getLogger(__name__)

# Form handlers for the two POST endpoints. Every failure ends up as a Flash;
# nothing here raises to the route.

_LINE_ITEMS = TypeAdapter(List[LineItem])


def _parse_total(raw) -> Optional[float]:
    try:
        total = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(total) or total <= 0:
        return None
    return total


# Sale processing
def process_sale_logic(sales: SalesStore, products: ProductStore, cart_data: str, cart_total) -> Flash:
    errors = []
    items: List[LineItem] = []

    try:
        decoded = json.loads(cart_data)
    except (TypeError, ValueError, RecursionError):
        decoded = None
        errors.append("Invalid cart data received.")

    if not decoded or not isinstance(decoded, list):
        errors.append("Cart is empty or data is corrupted.")
    else:
        try:
            items = _LINE_ITEMS.validate_python(decoded)
        except ValidationError as exc:
            logger.info("rejected cart with malformed line items: %s", exc)
            errors.append("Cart is empty or data is corrupted.")

    total = _parse_total(cart_total)
    if total is None:
        errors.append("Invalid cart total amount.")

    if errors:
        return Flash(message="Could not process sale due to errors: " + " ".join(errors), message_type="error")

    # Quantities are taken from the cart as submitted; live stock is not re-checked.
    sale = sales.record_sale(items, total)
    if sale is None:
        logger.error("failed to record sale (%d items, total %.2f)", len(items), total)
        return Flash(message="Failed to record the sale. Please try again.", message_type="error")

    stock_ok = True
    for item in items:
        if not products.update_stock(item.product_id, -item.quantity):
            logger.error(
                "failed to update stock for product %s during sale %s", item.product_id, sale.sale_id
            )
            stock_ok = False

    if stock_ok:
        return Flash(message="Sale recorded successfully!", message_type="success")
    return Flash(
        message="Sale recorded, but there was an issue updating stock levels. Please check inventory.",
        message_type="warning",
    )


# Product management
def _add(products: ProductStore, form: Dict[str, Optional[str]]) -> Flash:
    try:
        payload = ProductIn.model_validate({k: v for k, v in form.items() if v is not None})
    except ValidationError as exc:
        logger.info("rejected new product: %s", exc)
        payload = None
    if payload is None or products.add(payload) is None:
        return Flash(message="Failed to add product. Please check your input.", message_type="error")
    return Flash(message="Product added successfully!")


def _edit(products: ProductStore, product_id: Optional[str], form: Dict[str, Optional[str]]) -> Flash:
    if not product_id:
        return Flash(message="Product ID missing for update.", message_type="error")
    try:
        changes = ProductUpdate.model_validate(form)
    except ValidationError as exc:
        logger.info("rejected edit of %s: %s", product_id, exc)
        changes = None
    if changes is None or not products.update(product_id, changes):
        return Flash(
            message="Failed to update product. Please check your input or ensure the product exists.",
            message_type="error",
        )
    return Flash(message="Product updated successfully!")


def _delete(products: ProductStore, product_id: Optional[str]) -> Flash:
    if not product_id:
        return Flash(message="Product ID missing for delete action.", message_type="error")
    if not products.delete(product_id):
        return Flash(
            message="Failed to delete product. It might have already been removed or an error occurred.",
            message_type="error",
        )
    return Flash(message="Product deleted successfully!")


def manage_product_logic(
    products: ProductStore,
    action: str,
    product_id: Optional[str] = None,
    form: Optional[Dict[str, Optional[str]]] = None,
) -> Flash:
    form = form or {}
    if action == "add":
        return _add(products, form)
    if action == "edit":
        return _edit(products, product_id, form)
    if action == "delete":
        return _delete(products, product_id)
    return Flash(message="Unknown product action requested.", message_type="error")
