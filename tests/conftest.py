from datetime import datetime, timezone

import pytest

import data_integrator
from domain.models import Order


def make_order(
        row_id="abc123456",
        status="pending",
        final_total=100.0,
        subtotal=100.0,
        created_at="2026-10-10T10:00:00+00:00",
        payment_status=None,
        items=None,
        **extra,
):
    row = {
        "id": row_id,
        "order_id": f"ORD-{row_id}",
        "status": status,
        "customer": {"name": "Asha Rao", "phone": "9876543210", "address": {"city": "Pune"}},
        "items": items or [],
        "payment_method": "cash_on_delivery",
        "payment_status": payment_status,
        "pricing": {
            "subtotal": subtotal,
            "shipping_cost": 0,
            "bulk_discount_total": 0,
            "final_total": final_total,
        },
        "created_at": created_at,
    }
    row.update(extra)
    return Order.from_row(row)


class FakeStore:
    """
    Records calls made through the data_integrator functions the services
    use, and answers with canned results.
    """

    def __init__(self):
        self.calls = []
        self.result = None

    def _record(self, name, default, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        return self.result if self.result is not None else default

    def install(self, monkeypatch):
        monkeypatch.setattr(data_integrator, "fetch_rows",
                            lambda *a, **kw: self._record("fetch_rows", (True, "Fetched", []), *a, **kw))
        monkeypatch.setattr(data_integrator, "get_row",
                            lambda *a, **kw: self._record("get_row", (True, "No row found", None), *a, **kw))
        monkeypatch.setattr(data_integrator, "insert_row",
                            lambda *a, **kw: self._record("insert_row", (True, "Inserted", {"id": "new"}), *a, **kw))
        monkeypatch.setattr(data_integrator, "update_row",
                            lambda *a, **kw: self._record("update_row", (True, "Updated", {"id": a[1]}), *a, **kw))
        monkeypatch.setattr(data_integrator, "upsert_row",
                            lambda *a, **kw: self._record("upsert_row", (True, "Saved", a[1]), *a, **kw))
        monkeypatch.setattr(data_integrator, "delete_row",
                            lambda *a, **kw: self._record("delete_row", (True, "Deleted"), *a, **kw))
        monkeypatch.setattr(data_integrator, "delete_rows",
                            lambda *a, **kw: self._record("delete_rows", (True, "Deleted", len(a[1])), *a, **kw))
        return self

    def names(self):
        return [c[0] for c in self.calls]


@pytest.fixture
def store(monkeypatch):
    return FakeStore().install(monkeypatch)


@pytest.fixture
def now():
    return datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
