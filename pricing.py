from errors import ValidationError
from schemas import PriceQuote, Product


def effective_unit_price(base_price: float, bulk_price: float, bulk_threshold: int, quantity: int) -> float:
    # threshold is inclusive
    if quantity >= bulk_threshold:
        return bulk_price
    return base_price


def total_price(base_price: float, bulk_price: float, bulk_threshold: int, quantity: int) -> float:
    return effective_unit_price(base_price, bulk_price, bulk_threshold, quantity) * quantity


def quote_product(product: Product, quantity: int) -> PriceQuote:
    """Price a product line.

    Stock is not checked here; callers compare `quantity` against
    `product.quantity` before accepting an order.
    """
    if quantity < 1:
        raise ValidationError("invalid quantity")

    unit = effective_unit_price(product.base_price, product.bulk_price, product.bulk_threshold, quantity)
    bulk_applied = quantity >= product.bulk_threshold
    return PriceQuote(
        product_name=product.name,
        quantity=quantity,
        unit_price=unit,
        total_price=unit * quantity,
        bulk_applied=bulk_applied,
        savings=(product.base_price - product.bulk_price) * quantity if bulk_applied else 0,
        units_to_bulk=0 if bulk_applied else product.bulk_threshold - quantity,
    )


def format_price(amount: float) -> str:
    return f"${amount:.2f}"
