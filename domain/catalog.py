# domain/catalog.py

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar, Union

from domain.models import (
    UNKNOWN_LABEL,
    Category,
    Customer,
    Order,
    OrderStatus,
    Product,
)
from domain.metrics import stock_status

ALL = "all"
RECENT_CUSTOMER_DAYS = 30

Serialized = TypeVar("Serialized", Category, Product)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def serial_sort_key(entry: Union[Category, Product]):
    """
    Entries with a serial number come first, by ascending serial. Everything
    else (and ties) follows by newest created_at first.
    """
    has_serial = entry.serial_no is not None
    created = entry.created_at or _EPOCH
    return (
        0 if has_serial else 1,
        entry.serial_no if has_serial else 0,
        -created.timestamp(),
    )


def sort_by_serial(entries: Iterable[Serialized]) -> List[Serialized]:
    return sorted(entries, key=serial_sort_key)


def category_names(categories: Iterable[Category]) -> Dict[str, str]:
    return {c.id: c.name for c in categories}


def category_label(category_id: Optional[str], names: Dict[str, str]) -> str:
    return names.get(category_id or "", UNKNOWN_LABEL)


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def filter_products(
        products: Sequence[Product],
        search: str = "",
        category_id: str = ALL,
        stock_bucket: str = ALL,
) -> List[Product]:
    """
    search matches name or SKU (case-insensitive); stock_bucket is one of
    all / out / low / in.
    """
    term = search.strip().lower()

    def keep(p: Product) -> bool:
        if term and not (_contains(p.name, term) or _contains(p.sku, term)):
            return False
        if category_id != ALL and p.category_id != category_id:
            return False
        if stock_bucket != ALL and stock_status(p.stock) != stock_bucket:
            return False
        return True

    return [p for p in products if keep(p)]


def filter_categories(categories: Sequence[Category], search: str = "") -> List[Category]:
    term = search.strip().lower()
    if not term:
        return list(categories)
    return [c for c in categories if _contains(c.name, term) or _contains(c.description, term)]


def filter_orders(orders: Sequence[Order], search: str = "", status: str = ALL) -> List[Order]:
    term = search.strip().lower()
    raw_term = search.strip()

    def keep(o: Order) -> bool:
        if term and not (
                _contains(o.order_id, term)
                or _contains(o.customer.name, term)
                or raw_term in o.customer.phone
        ):
            return False
        if status != ALL and o.status != OrderStatus.parse(status):
            return False
        return True

    return [o for o in orders if keep(o)]


def filter_customers(
        customers: Sequence[Customer],
        search: str = "",
        recent_only: bool = False,
        now: Optional[datetime] = None,
) -> List[Customer]:
    term = search.strip().lower()
    raw_term = search.strip()
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=RECENT_CUSTOMER_DAYS)

    def keep(c: Customer) -> bool:
        if term and not (
                _contains(c.name, term)
                or _contains(c.email, term)
                or raw_term in c.phone
        ):
            return False
        if recent_only and (c.created_at is None or c.created_at <= cutoff):
            return False
        return True

    return [c for c in customers if keep(c)]


def load_rows(rows: Iterable[Dict], parse: Callable, on_error: Optional[Callable] = None) -> List:
    """
    Parse raw rows with `parse`, skipping the ones that don't validate.
    `on_error(row, exc)` is told about each skipped row.
    """
    parsed = []
    for row in rows:
        try:
            if not isinstance(row, dict):
                raise ValueError(f"Expected a document, got {row!r}")
            parsed.append(parse(row))
        except (ValueError, TypeError) as e:
            if on_error is not None:
                on_error(row, e)
    return parsed
