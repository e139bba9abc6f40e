# services/inventory_service.py

import dataclasses
import logging
from datetime import date
from typing import Any, List, Tuple

import pandas as pd

import data_integrator
from domain.catalog import category_label
from domain.models import Product
from domain.pricing import effective_unit_price

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = "products"

EXPORT_COLUMNS = ["SKU", "Product Name", "Category", "Stock", "Price", "Sale Price", "Stock Value"]


def coerce_stock(value: Any) -> Tuple[bool, str, int]:
    """
    Turn whatever was typed into an integer stock count.
    Negative values are accepted as typed.
    """
    if isinstance(value, bool):
        return False, "Stock must be a whole number", 0
    try:
        if isinstance(value, float):
            if not value.is_integer():
                return False, "Stock must be a whole number", 0
            return True, "", int(value)
        return True, "", int(str(value).strip())
    except (TypeError, ValueError):
        return False, "Stock must be a whole number", 0


def save_stock(products: List[Product], product_id: str, new_stock: Any) -> Tuple[bool, str, List[Product]]:
    """
    Write a new stock count for one product.

    On success the returned list is `products` with that one entry's stock
    replaced; on failure it is `products` unchanged. Nothing is re-fetched.
    """
    ok, msg, stock = coerce_stock(new_stock)
    if not ok:
        return False, msg, products

    ok, msg, _ = data_integrator.update_row(PRODUCTS_TABLE, product_id, {"stock": stock})
    if not ok:
        logger.error("Stock update for product %s failed: %s", product_id, msg)
        return False, "Failed to update stock. Please try again.", products

    updated = [
        dataclasses.replace(p, stock=stock) if p.id == product_id else p
        for p in products
    ]
    return True, "Stock updated", updated


def save_stock_changes(
        products: List[Product],
        changes: List[Tuple[str, Any]],
) -> Tuple[List[Product], int, List[str]]:
    """
    Apply (product_id, new_stock) edits one at a time through save_stock.
    Returns (patched products, number saved, failure messages).
    """
    current = products
    saved = 0
    failures = []
    for product_id, new_stock in changes:
        ok, msg, current = save_stock(current, product_id, new_stock)
        if ok:
            saved += 1
        else:
            failures.append(msg)
    return current, saved, failures


def inventory_frame(products: List[Product], names: dict) -> pd.DataFrame:
    rows = [
        {
            "SKU": p.sku,
            "Product Name": p.name,
            "Category": category_label(p.category_id, names),
            "Stock": p.stock,
            "Price": p.price,
            "Sale Price": p.sale_price if p.sale_price else "-",
            "Stock Value": effective_unit_price(p) * p.stock,
        }
        for p in products
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_csv(products: List[Product], names: dict) -> bytes:
    return inventory_frame(products, names).to_csv(index=False).encode("utf-8")


def export_file_name(today: date) -> str:
    return f"inventory_{today.isoformat()}.csv"
