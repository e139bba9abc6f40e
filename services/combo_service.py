# services/combo_service.py

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import data_integrator
from domain.catalog import load_rows
from domain.models import Combo, ComboProduct, Product
from domain.pricing import combo_original_price, combo_savings, validate_combo_products
from utils.coercion import parse_timestamp, to_float

logger = logging.getLogger(__name__)

COMBOS_TABLE = "combos"


def load_combos() -> Tuple[bool, str, List[Combo]]:
    ok, msg, rows = data_integrator.fetch_rows(COMBOS_TABLE)
    if not ok:
        return False, msg, []
    combos = load_rows(
        rows,
        Combo.from_row,
        on_error=lambda row, e: logger.warning("Skipping combo %s: %s", row.get("id"), e),
    )
    return True, msg, combos


def combo_product_from(product: Product, quantity: int = 1) -> ComboProduct:
    """Capture the product's current list price for the combo."""
    return ComboProduct(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        price=product.price,
    )


def _window_bound(value: Any, end_of_day: bool = False) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    return parse_timestamp(value)


def build_combo_payload(form: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Validate the combo form and compute its derived prices.

    original_price and savings are recomputed here from the products in
    the form; any values the form carries for them are ignored.
    """
    products: Sequence[ComboProduct] = form.get("products") or []

    ok, msg = validate_combo_products(products)
    if not ok:
        return False, msg, None

    if not (form.get("name") or "").strip():
        return False, "Combo name cannot be empty", None

    try:
        combo_price = to_float(form.get("combo_price"))
        valid_from = _window_bound(form.get("valid_from"))
        valid_until = _window_bound(form.get("valid_until"), end_of_day=True)
    except ValueError as e:
        return False, f"Invalid combo details: {e}", None

    if combo_price < 0:
        return False, "Combo price cannot be negative", None
    if valid_from and valid_until and valid_until < valid_from:
        return False, "Valid until must be after valid from", None

    original_price = combo_original_price(products)
    combo = Combo(
        id="",
        name=form["name"].strip(),
        description=(form.get("description") or "").strip(),
        products=list(products),
        original_price=original_price,
        combo_price=combo_price,
        savings=combo_savings(original_price, combo_price),
        image_url=form.get("image_url") or "",
        is_active=bool(form.get("is_active", True)),
        is_featured=bool(form.get("is_featured", False)),
        valid_from=valid_from,
        valid_until=valid_until,
    )
    return True, "", combo.to_row()


def save_combo(form: Dict[str, Any], combo_id: Optional[str] = None) -> Tuple[bool, str, Optional[Dict]]:
    """
    Create or update a combo. Invalid forms never reach the database.
    Returns (ok, message, row)
    """
    ok, msg, payload = build_combo_payload(form)
    if not ok:
        return False, msg, None

    if combo_id:
        ok, msg, row = data_integrator.update_row(COMBOS_TABLE, combo_id, payload)
        done = "Combo has been updated successfully"
    else:
        ok, msg, row = data_integrator.insert_row(COMBOS_TABLE, payload)
        done = "New combo has been created successfully"

    if not ok:
        logger.error("Saving combo failed: %s", msg)
        return False, "Failed to save combo. Please try again.", None
    return True, done, row


def delete_combo(combo_id: str) -> Tuple[bool, str]:
    ok, msg = data_integrator.delete_row(COMBOS_TABLE, combo_id)
    if not ok:
        logger.error("Deleting combo %s failed: %s", combo_id, msg)
        return False, "Failed to delete combo. Please try again."
    return True, "Combo deleted"


def is_combo_live(combo: Combo, now: Optional[datetime] = None) -> bool:
    if not combo.is_active:
        return False
    now = now or datetime.now(timezone.utc)
    if combo.valid_from and now < combo.valid_from:
        return False
    if combo.valid_until and now > combo.valid_until:
        return False
    return True
