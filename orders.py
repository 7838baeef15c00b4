"""
Order submission rules.

validate_order() checks a raw submission and returns a normalized Order;
price_order() fills in product pricing and vendor details from the catalog.
"""

import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from catalog import Catalog
from errors import NotFoundError, ValidationError
from pricing import quote_product
from schemas import DESIGN_TYPES, ORDER_STATUSES, Order, Vendor

REQUIRED_FIELDS = ("customerName", "customerEmail", "designType")
VENDOR_CONTACT_FIELDS = ("name", "address", "phone", "email")

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_order_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _validate_vendor(raw: Any) -> Vendor:
    if not isinstance(raw, dict):
        raise ValidationError("invalid vendor")
    for field in VENDOR_CONTACT_FIELDS:
        if not _text(raw.get(field)):
            raise ValidationError("invalid vendor")
    try:
        return Vendor(**raw)
    except ValueError:
        raise ValidationError("invalid vendor")


def _validate_quantity(raw: Any) -> int:
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)
    elif isinstance(raw, str) and raw.strip().isdigit():
        raw = int(raw)
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        raise ValidationError("invalid quantity")
    return raw


def validate_order(
    data: Dict[str, Any],
    now: Callable[[], datetime] = utc_now,
    make_id: Callable[[], str] = new_order_id,
) -> Order:
    """Validate a submitted order and apply defaults.

    Raises ValidationError naming the first offending field. Nothing is
    persisted here; the clock and id generator are injectable for tests.
    """
    if not isinstance(data, dict):
        raise ValidationError("order payload must be a JSON object")

    for field in REQUIRED_FIELDS:
        if not _text(data.get(field)):
            raise ValidationError(f"missing required field: {field}")

    design_type = _text(data.get("designType"))
    if design_type not in DESIGN_TYPES:
        raise ValidationError("invalid designType")

    status = _text(data.get("status")) or "pending"
    if status not in ORDER_STATUSES:
        raise ValidationError("invalid status")

    vendor = None
    if data.get("vendor") is not None:
        vendor = _validate_vendor(data["vendor"])

    # customImagePath is the older name for the same reference
    design_ref = _text(data.get("customDesignFile")) or _text(data.get("customImagePath"))
    if design_type == "custom" and not design_ref:
        raise ValidationError("missing custom design reference")

    quantity = None
    if data.get("quantity") is not None:
        quantity = _validate_quantity(data["quantity"])

    fields = {
        "id": make_id(),
        "product_name": _text(data.get("productName")),
        "product_type": _text(data.get("productType")),
        "quantity": quantity,
        "decoration_name": _text(data.get("decorationName")),
        "design_type": design_type,
        "customer_name": _text(data["customerName"]),
        "customer_email": _text(data["customerEmail"]),
        "order_date": _text(data.get("orderDate")) or now().isoformat(),
        "status": status,
        "vendor": vendor,
        "notes": _text(data.get("notes")),
    }
    if design_type == "custom":
        fields["custom_design_file"] = design_ref
        fields["is_custom_design"] = True
    else:
        fields["selected_design"] = _text(data.get("selectedDesign"))

    try:
        return Order(**fields)
    except ValueError as e:
        raise ValidationError(f"invalid order: {e}")


def price_order(order: Order, catalog: Catalog) -> Order:
    """Attach catalog pricing and vendor details to a validated order."""
    update: Dict[str, Any] = {}

    if order.product_name:
        try:
            product = catalog.get_product(order.product_name)
        except NotFoundError:
            raise ValidationError(f"unknown product: {order.product_name}")
        if order.quantity is None:
            raise ValidationError("missing required field: quantity")
        if order.quantity > product.quantity:
            raise ValidationError("quantity exceeds available stock")
        quote = quote_product(product, order.quantity)
        update.update(
            product_name=product.name,
            product_type=product.type,
            base_price=product.base_price,
            unit_price=quote.unit_price,
            total_price=quote.total_price,
            vendor=product.vendor.model_copy(deep=True),
        )
    else:
        # decoration-only orders carry no price
        update.update(quantity=None, base_price=None, unit_price=None, total_price=None, product_type=None)
        if order.decoration_name:
            try:
                decoration = catalog.get_decoration(order.decoration_name)
            except NotFoundError:
                raise ValidationError(f"unknown decoration: {order.decoration_name}")
            update.update(decoration_name=decoration.name, vendor=decoration.vendor.model_copy(deep=True))

    return order.model_copy(update=update)


def _matches(order: Dict[str, Any], needle: str) -> bool:
    for key in ("id", "productName", "customerName", "customerEmail"):
        value = order.get(key)
        if value and needle in str(value).lower():
            return True
    return False


def filter_orders(
    orders: Iterable[Dict[str, Any]],
    q: Optional[str] = None,
    status: Optional[str] = None,
    design_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    result = [o for o in orders if isinstance(o, dict)]
    if q and q.strip():
        needle = q.strip().lower()
        result = [o for o in result if _matches(o, needle)]
    if status and status != "all":
        result = [o for o in result if o.get("status") == status]
    if design_type and design_type != "all":
        result = [o for o in result if o.get("designType") == design_type]
    return result
