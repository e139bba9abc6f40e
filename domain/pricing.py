# domain/pricing.py

from typing import Iterable, List, Optional, Sequence, Tuple

from domain.models import (
    BulkPricingTier,
    ComboProduct,
    Order,
    OrderItem,
    PricingSummary,
    Product,
    StoreSettings,
)

MIN_COMBO_PRODUCTS = 2


def effective_unit_price(product: Product) -> float:
    """Sale price when one is set, list price otherwise."""
    if product.sale_price:
        return product.sale_price
    return product.price


# ---------------------------------------------------------------------------
# Combos
# ---------------------------------------------------------------------------

def combo_original_price(products: Iterable[ComboProduct]) -> float:
    return sum(p.price * p.quantity for p in products)


def combo_savings(original_price: float, combo_price: float) -> float:
    # negative savings (combo dearer than its parts) are allowed
    return original_price - combo_price


def validate_combo_products(products: Sequence[ComboProduct]) -> Tuple[bool, str]:
    distinct = {p.product_id for p in products if p.product_id}
    if len(distinct) < MIN_COMBO_PRODUCTS:
        return False, "A combo must have at least 2 products"
    if any(p.quantity < 1 for p in products):
        return False, "Every combo product needs a quantity of at least 1"
    return True, ""


# ---------------------------------------------------------------------------
# Bulk tiers
# ---------------------------------------------------------------------------

def match_bulk_tier(tiers: Sequence[BulkPricingTier], quantity: int) -> Optional[BulkPricingTier]:
    """
    Pick the tier that applies to `quantity`.

    Among tiers whose [min_quantity, max_quantity] range holds the quantity
    (a missing max is unbounded), the one with the highest min_quantity wins.
    Equal minimums keep the first listed tier.
    """
    best: Optional[BulkPricingTier] = None
    for tier in tiers:
        if not tier.contains(quantity):
            continue
        if best is None or tier.min_quantity > best.min_quantity:
            best = tier
    return best


def validate_tiers(tiers: Sequence[BulkPricingTier]) -> Tuple[bool, str]:
    if not tiers:
        return False, "Add at least one pricing tier"
    for i, tier in enumerate(tiers, start=1):
        if tier.min_quantity < 0:
            return False, f"Tier {i}: minimum quantity cannot be negative"
        if tier.max_quantity is not None and tier.max_quantity < tier.min_quantity:
            return False, f"Tier {i}: maximum quantity is below the minimum"
        if not 0 <= tier.discount_percentage <= 100:
            return False, f"Tier {i}: discount must be between 0 and 100"
    return True, ""


def bulk_discount_per_unit(unit_price: float, tier: Optional[BulkPricingTier]) -> float:
    if tier is None:
        return 0.0
    return round(unit_price * tier.discount_percentage / 100, 2)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

def price_line_item(
        product: Product,
        quantity: int,
        tiers: Sequence[BulkPricingTier] = (),
) -> OrderItem:
    unit_price = effective_unit_price(product)
    discount = bulk_discount_per_unit(unit_price, match_bulk_tier(tiers, quantity))
    final_unit_price = unit_price - discount
    return OrderItem(
        product_id=product.id,
        quantity=quantity,
        unit_price=unit_price,
        final_unit_price=final_unit_price,
        line_total=quantity * final_unit_price,
        bulk_discount_per_unit=discount,
        product_name=product.name,
        sku=product.sku,
    )


def shipping_for_subtotal(subtotal: float, settings: StoreSettings) -> float:
    if settings.free_shipping_threshold and subtotal >= settings.free_shipping_threshold:
        return 0.0
    return settings.shipping_cost


def order_pricing(items: Sequence[OrderItem], shipping_cost: float) -> PricingSummary:
    """
    subtotal is before bulk discounts, so
    final_total = subtotal - bulk_discount_total + shipping_cost.
    """
    subtotal = sum(i.quantity * i.unit_price for i in items)
    discount_total = sum(i.quantity * i.bulk_discount_per_unit for i in items)
    return PricingSummary(
        subtotal=round(subtotal, 2),
        shipping_cost=shipping_cost,
        bulk_discount_total=round(discount_total, 2),
        final_total=round(subtotal - discount_total + shipping_cost, 2),
        item_count=sum(i.quantity for i in items),
    )


def pricing_errors(order: Order, tolerance: float = 0.01) -> List[str]:
    errors: List[str] = []
    p = order.pricing
    if p is not None:
        expected = p.subtotal - p.bulk_discount_total + p.shipping_cost
        if abs(p.final_total - expected) > tolerance:
            errors.append(
                f"final_total {p.final_total} != subtotal - discount + shipping ({expected})"
            )
    for n, item in enumerate(order.items, start=1):
        if abs(item.line_total - item.quantity * item.final_unit_price) > tolerance:
            errors.append(f"item {n}: line_total {item.line_total} != quantity * final_unit_price")
    return errors


def pricing_is_consistent(order: Order, tolerance: float = 0.01) -> bool:
    return not pricing_errors(order, tolerance)
