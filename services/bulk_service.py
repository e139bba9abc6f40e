# services/bulk_service.py

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import data_integrator
from domain.catalog import load_rows
from domain.models import BulkPricing, BulkPricingTier, WholesaleAccount
from domain.pricing import validate_tiers
from utils.coercion import to_float

logger = logging.getLogger(__name__)

BULK_PRICING_TABLE = "bulk_pricing"
WHOLESALE_ACCOUNTS_TABLE = "wholesale_accounts"

DEFAULT_TIER = BulkPricingTier(min_quantity=10, discount_percentage=5)
PAYMENT_TERMS = ("Immediate", "15 days", "30 days", "45 days", "60 days")


def load_bulk_pricing() -> Tuple[bool, str, List[BulkPricing]]:
    ok, msg, rows = data_integrator.fetch_rows(BULK_PRICING_TABLE)
    if not ok:
        return False, msg, []
    return True, msg, load_rows(
        rows,
        BulkPricing.from_row,
        on_error=lambda row, e: logger.warning("Skipping bulk pricing %s: %s", row.get("id"), e),
    )


def load_wholesale_accounts() -> Tuple[bool, str, List[WholesaleAccount]]:
    ok, msg, rows = data_integrator.fetch_rows(WHOLESALE_ACCOUNTS_TABLE)
    if not ok:
        return False, msg, []
    return True, msg, load_rows(
        rows,
        WholesaleAccount.from_row,
        on_error=lambda row, e: logger.warning("Skipping wholesale account %s: %s", row.get("id"), e),
    )


# ---------------------------------------------------------------------------
# Bulk pricing
# ---------------------------------------------------------------------------

def save_bulk_pricing(
        name: str,
        description: str,
        tiers: List[BulkPricingTier],
        is_active: bool = True,
        pricing_id: Optional[str] = None,
) -> Tuple[bool, str, Optional[Dict]]:
    if not (name or "").strip():
        return False, "Pricing name cannot be empty", None

    ok, msg = validate_tiers(tiers)
    if not ok:
        return False, msg, None

    payload = BulkPricing(
        id=pricing_id or "",
        name=name.strip(),
        description=(description or "").strip(),
        tiers=list(tiers),
        is_active=is_active,
    ).to_row()

    if pricing_id:
        ok, msg, row = data_integrator.update_row(BULK_PRICING_TABLE, pricing_id, payload)
        done = "Bulk pricing has been updated successfully"
    else:
        ok, msg, row = data_integrator.insert_row(BULK_PRICING_TABLE, payload)
        done = "New bulk pricing has been created successfully"

    if not ok:
        logger.error("Saving bulk pricing failed: %s", msg)
        return False, "Failed to save pricing. Please try again.", None
    return True, done, row


def delete_bulk_pricing(pricing_id: str) -> Tuple[bool, str]:
    ok, msg = data_integrator.delete_row(BULK_PRICING_TABLE, pricing_id)
    if not ok:
        logger.error("Deleting bulk pricing %s failed: %s", pricing_id, msg)
        return False, "Failed to delete pricing. Please try again."
    return True, "Bulk pricing has been deleted successfully"


# ---------------------------------------------------------------------------
# Wholesale accounts
# ---------------------------------------------------------------------------

def validate_account_form(form: Dict[str, Any]) -> Tuple[bool, str]:
    if not (form.get("company_name") or "").strip():
        return False, "Company name cannot be empty"
    email = (form.get("email") or "").strip()
    if email and not re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email):
        return False, f"'{email}' is not a valid email address"
    try:
        discount_rate = to_float(form.get("discount_rate"))
        credit_limit = to_float(form.get("credit_limit"))
    except ValueError:
        return False, "Discount rate and credit limit must be numbers"
    if not 0 <= discount_rate <= 100:
        return False, "Discount rate must be between 0 and 100"
    if credit_limit < 0:
        return False, "Credit limit cannot be negative"
    return True, ""


def account_payload(form: Dict[str, Any]) -> Dict[str, Any]:
    return WholesaleAccount(
        id="",
        company_name=form["company_name"].strip(),
        contact_person=(form.get("contact_person") or "").strip(),
        email=(form.get("email") or "").strip(),
        phone=(form.get("phone") or "").strip(),
        address=(form.get("address") or "").strip(),
        gst_number=(form.get("gst_number") or "").strip().upper(),
        discount_rate=to_float(form.get("discount_rate")),
        credit_limit=to_float(form.get("credit_limit")),
        payment_terms=form.get("payment_terms") or "30 days",
        is_active=bool(form.get("is_active", True)),
    ).to_row()


def save_wholesale_account(form: Dict[str, Any], account_id: Optional[str] = None) -> Tuple[bool, str, Optional[Dict]]:
    ok, msg = validate_account_form(form)
    if not ok:
        return False, msg, None

    payload = account_payload(form)
    if account_id:
        ok, msg, row = data_integrator.update_row(WHOLESALE_ACCOUNTS_TABLE, account_id, payload)
        done = "Wholesale account has been updated successfully"
    else:
        ok, msg, row = data_integrator.insert_row(WHOLESALE_ACCOUNTS_TABLE, payload)
        done = "New wholesale account has been created successfully"

    if not ok:
        logger.error("Saving wholesale account failed: %s", msg)
        return False, "Failed to save account. Please try again.", None
    return True, done, row


def delete_wholesale_account(account_id: str) -> Tuple[bool, str]:
    ok, msg = data_integrator.delete_row(WHOLESALE_ACCOUNTS_TABLE, account_id)
    if not ok:
        logger.error("Deleting wholesale account %s failed: %s", account_id, msg)
        return False, "Failed to delete account. Please try again."
    return True, "Wholesale account has been deleted successfully"
