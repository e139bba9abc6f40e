# services/catalog_service.py

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import data_integrator
from domain.catalog import load_rows, sort_by_serial
from domain.models import Category, Product
from utils.coercion import to_float, to_int, to_optional_float, to_optional_int

logger = logging.getLogger(__name__)

CATEGORIES_TABLE = "categories"
PRODUCTS_TABLE = "products"


def _log_skip(kind: str):
    return lambda row, e: logger.warning("Skipping %s %s: %s", kind, row.get("id"), e)


def load_categories() -> Tuple[bool, str, List[Category]]:
    ok, msg, rows = data_integrator.fetch_rows(CATEGORIES_TABLE)
    if not ok:
        return False, msg, []
    return True, msg, sort_by_serial(load_rows(rows, Category.from_row, _log_skip("category")))


def load_products() -> Tuple[bool, str, List[Product]]:
    ok, msg, rows = data_integrator.fetch_rows(PRODUCTS_TABLE)
    if not ok:
        return False, msg, []
    return True, msg, sort_by_serial(load_rows(rows, Product.from_row, _log_skip("product")))


def normalize_serial(value: Any) -> Optional[int]:
    # 0 or blank clears the serial
    serial = to_optional_int(value)
    return serial if serial else None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_category_form(form: Dict[str, Any]) -> Tuple[bool, str]:
    name = (form.get("name") or "").strip()
    if not name:
        return False, "Category name cannot be empty"
    if len(name) > 80:
        return False, "Category name must be at most 80 characters"
    try:
        normalize_serial(form.get("serial_no"))
    except ValueError:
        return False, "Serial number must be a whole number"
    return True, ""


def validate_product_form(form: Dict[str, Any]) -> Tuple[bool, str]:
    if not (form.get("name") or "").strip():
        return False, "Product name cannot be empty"
    if not form.get("category_id"):
        return False, "Please choose a category"
    try:
        price = to_float(form.get("price"))
        sale_price = to_optional_float(form.get("sale_price"))
        to_int(form.get("stock"))
        normalize_serial(form.get("serial_no"))
    except ValueError:
        return False, "Price, stock and serial number must be numbers"
    if price < 0:
        return False, "Price cannot be negative"
    if sale_price is not None and sale_price < 0:
        return False, "Sale price cannot be negative"
    sku = (form.get("sku") or "").strip()
    if sku and not re.match(r"^[A-Za-z0-9_-]{1,40}$", sku):
        return False, "SKU may only contain letters, numbers, '-' and '_'"
    return True, ""


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

def category_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": form["name"].strip(),
        "description": (form.get("description") or "").strip(),
        "image_url": form.get("image_url") or "",
        "is_active": bool(form.get("is_active", True)),
        "serial_no": normalize_serial(form.get("serial_no")),
    }


def product_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    sale_price = to_optional_float(form.get("sale_price"))
    return {
        "name": form["name"].strip(),
        "description": (form.get("description") or "").strip(),
        "category_id": form["category_id"],
        "price": to_float(form.get("price")),
        "sale_price": sale_price if sale_price else None,
        "stock": to_int(form.get("stock")),
        "sku": (form.get("sku") or "").strip(),
        "is_active": bool(form.get("is_active", True)),
        "serial_no": normalize_serial(form.get("serial_no")),
        "weight": form.get("weight") or "",
        "dimensions": form.get("dimensions") or "",
        "ingredients": form.get("ingredients") or "",
        "instructions": form.get("instructions") or "",
        "images": list(form.get("images") or []),
    }


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def save_category(form: Dict[str, Any], category_id: Optional[str] = None) -> Tuple[bool, str, Optional[Dict]]:
    """
    Create a category, or update it when `category_id` is given.
    Returns (ok, message, row)
    """
    ok, msg = validate_category_form(form)
    if not ok:
        return False, msg, None

    payload = category_payload(form)
    if category_id:
        ok, msg, row = data_integrator.update_row(CATEGORIES_TABLE, category_id, payload)
        done = "Category updated successfully"
    else:
        ok, msg, row = data_integrator.insert_row(CATEGORIES_TABLE, payload)
        done = "Category created successfully"

    if not ok:
        logger.error("Saving category failed: %s", msg)
        return False, "Failed to save category. Please try again.", None
    return True, done, row


def save_product(form: Dict[str, Any], product_id: Optional[str] = None) -> Tuple[bool, str, Optional[Dict]]:
    ok, msg = validate_product_form(form)
    if not ok:
        return False, msg, None

    payload = product_payload(form)
    if product_id:
        ok, msg, row = data_integrator.update_row(PRODUCTS_TABLE, product_id, payload)
        done = "Product updated successfully"
    else:
        ok, msg, row = data_integrator.insert_row(PRODUCTS_TABLE, payload)
        done = "Product created successfully"

    if not ok:
        logger.error("Saving product failed: %s", msg)
        return False, "Failed to save product. Please try again.", None
    return True, done, row


def delete_category(category_id: str) -> Tuple[bool, str]:
    ok, msg = data_integrator.delete_row(CATEGORIES_TABLE, category_id)
    if not ok:
        logger.error("Deleting category %s failed: %s", category_id, msg)
        return False, "Failed to delete category. Please try again."
    return True, "Category deleted"


def delete_product(product_id: str) -> Tuple[bool, str]:
    ok, msg = data_integrator.delete_row(PRODUCTS_TABLE, product_id)
    if not ok:
        logger.error("Deleting product %s failed: %s", product_id, msg)
        return False, "Failed to delete product. Please try again."
    return True, "Product deleted"
