# domain/models.py

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from utils.coercion import (
    format_timestamp,
    parse_timestamp,
    to_bool,
    to_float,
    to_int,
    to_optional_float,
    to_optional_int,
    to_list,
    to_mapping,
    to_str,
)

# shown wherever a referenced document has not been loaded or no longer exists
UNKNOWN_LABEL = "Unknown"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown order status: {value!r}")


def _serial_no(value: Any) -> Optional[int]:
    # 0 and blank both mean "no serial"
    serial = to_optional_int(value)
    return serial if serial else None


@dataclass
class Category:
    id: str
    name: str
    description: str = ""
    image_url: str = ""
    is_active: bool = True
    serial_no: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Category":
        return cls(
            id=to_str(row.get("id")),
            name=to_str(row.get("name")),
            description=to_str(row.get("description")),
            image_url=to_str(row.get("image_url")),
            is_active=to_bool(row.get("is_active"), default=True),
            serial_no=_serial_no(row.get("serial_no")),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "serial_no": self.serial_no,
        }


@dataclass
class Product:
    id: str
    name: str
    price: float
    stock: int = 0
    sku: str = ""
    description: str = ""
    category_id: str = ""
    sale_price: Optional[float] = None
    is_active: bool = True
    serial_no: Optional[int] = None
    weight: str = ""
    dimensions: str = ""
    ingredients: str = ""
    instructions: str = ""
    images: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        return cls(
            id=to_str(row.get("id")),
            name=to_str(row.get("name")),
            price=to_float(row.get("price")),
            stock=to_int(row.get("stock")),
            sku=to_str(row.get("sku")),
            description=to_str(row.get("description")),
            category_id=to_str(row.get("category_id")),
            sale_price=to_optional_float(row.get("sale_price")),
            is_active=to_bool(row.get("is_active"), default=True),
            serial_no=_serial_no(row.get("serial_no")),
            weight=to_str(row.get("weight")),
            dimensions=to_str(row.get("dimensions")),
            ingredients=to_str(row.get("ingredients")),
            instructions=to_str(row.get("instructions")),
            images=[str(u) for u in to_list(row.get("images"))],
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category_id": self.category_id,
            "price": self.price,
            "sale_price": self.sale_price,
            "stock": self.stock,
            "sku": self.sku,
            "is_active": self.is_active,
            "serial_no": self.serial_no,
            "weight": self.weight,
            "dimensions": self.dimensions,
            "ingredients": self.ingredients,
            "instructions": self.instructions,
            "images": list(self.images),
        }


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@dataclass
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    full_address: str = ""

    @classmethod
    def from_row(cls, row: Any) -> "Address":
        # older storefront builds wrote the address as one string
        if isinstance(row, str):
            return cls(full_address=row)
        row = to_mapping(row)
        return cls(
            street=to_str(row.get("street")),
            city=to_str(row.get("city")),
            state=to_str(row.get("state")),
            pincode=to_str(row.get("pincode")),
            full_address=to_str(row.get("full_address")),
        )

    def display(self) -> str:
        if self.full_address:
            return self.full_address
        parts = [self.street, self.city, self.state]
        text = ", ".join(p for p in parts if p)
        if self.pincode:
            text = f"{text} - {self.pincode}" if text else self.pincode
        return text


@dataclass
class CustomerSnapshot:
    name: str = ""
    phone: str = ""
    address: Address = field(default_factory=Address)

    @classmethod
    def from_row(cls, row: Optional[Dict[str, Any]]) -> "CustomerSnapshot":
        row = to_mapping(row)
        return cls(
            name=to_str(row.get("name")),
            phone=to_str(row.get("phone")),
            address=Address.from_row(row.get("address")),
        )


@dataclass
class OrderItem:
    product_id: str
    quantity: int
    unit_price: float
    final_unit_price: float
    line_total: float
    bulk_discount_per_unit: float = 0.0
    product_name: str = ""
    sku: str = ""
    product_details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "OrderItem":
        details = to_mapping(row.get("product_details"))
        unit_price = to_float(row.get("unit_price", row.get("price")))
        discount = to_float(row.get("bulk_discount_per_unit"))
        final_unit_price = to_float(row.get("final_unit_price"), default=unit_price - discount)
        quantity = to_int(row.get("quantity"))
        return cls(
            product_id=to_str(row.get("product_id")),
            quantity=quantity,
            unit_price=unit_price,
            final_unit_price=final_unit_price,
            line_total=to_float(row.get("line_total"), default=quantity * final_unit_price),
            bulk_discount_per_unit=discount,
            product_name=to_str(row.get("product_name") or details.get("name")),
            sku=to_str(details.get("sku")),
            product_details=dict(details),
        )


@dataclass
class PricingSummary:
    subtotal: float = 0.0
    shipping_cost: float = 0.0
    bulk_discount_total: float = 0.0
    final_total: float = 0.0
    item_count: int = 0

    @classmethod
    def from_row(cls, row: Optional[Dict[str, Any]]) -> "PricingSummary":
        row = to_mapping(row)
        return cls(
            subtotal=to_float(row.get("subtotal")),
            shipping_cost=to_float(row.get("shipping_cost")),
            bulk_discount_total=to_float(row.get("bulk_discount_total")),
            final_total=to_float(row.get("final_total")),
            item_count=to_int(row.get("item_count")),
        )


@dataclass
class OrderFlags:
    is_new_customer: bool = False
    priority: str = "normal"
    requires_verification: bool = False

    @classmethod
    def from_row(cls, row: Optional[Dict[str, Any]]) -> "OrderFlags":
        row = to_mapping(row)
        return cls(
            is_new_customer=to_bool(row.get("is_new_customer")),
            priority=to_str(row.get("priority"), default="normal") or "normal",
            requires_verification=to_bool(row.get("requires_verification")),
        )


@dataclass
class Order:
    id: str
    order_id: str
    status: OrderStatus
    customer: CustomerSnapshot = field(default_factory=CustomerSnapshot)
    items: List[OrderItem] = field(default_factory=list)
    payment_method: str = ""
    payment_status: Optional[str] = None
    pricing: Optional[PricingSummary] = None
    total_amount: Optional[float] = None  # legacy orders carry only this
    tracking_number: Optional[str] = None
    flags: OrderFlags = field(default_factory=OrderFlags)
    customer_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Order":
        row_id = to_str(row.get("id"))
        pricing_row = row.get("pricing")
        return cls(
            id=row_id,
            order_id=to_str(row.get("order_id") or row.get("order_number")) or f"ORD-{row_id[-6:]}",
            status=OrderStatus.parse(row.get("status") or OrderStatus.PENDING),
            customer=CustomerSnapshot.from_row(row.get("customer")),
            items=[OrderItem.from_row(to_mapping(i)) for i in to_list(row.get("items"))],
            payment_method=to_str(row.get("payment_method")),
            payment_status=row.get("payment_status"),
            pricing=PricingSummary.from_row(pricing_row) if pricing_row is not None else None,
            total_amount=to_optional_float(row.get("total_amount")),
            tracking_number=row.get("tracking_number") or None,
            flags=OrderFlags.from_row(row.get("flags")),
            customer_id=row.get("customer_id"),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )


@dataclass
class Customer:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: Address = field(default_factory=Address)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Customer":
        return cls(
            id=to_str(row.get("id")),
            name=to_str(row.get("name")),
            email=to_str(row.get("email")),
            phone=to_str(row.get("phone")),
            address=Address.from_row(row.get("address")),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )


# ---------------------------------------------------------------------------
# Bulk pricing / wholesale
# ---------------------------------------------------------------------------

@dataclass
class BulkPricingTier:
    min_quantity: int
    discount_percentage: float
    max_quantity: Optional[int] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BulkPricingTier":
        return cls(
            min_quantity=to_int(row.get("min_quantity")),
            discount_percentage=to_float(row.get("discount_percentage")),
            max_quantity=to_optional_int(row.get("max_quantity")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "min_quantity": self.min_quantity,
            "max_quantity": self.max_quantity,
            "discount_percentage": self.discount_percentage,
        }

    def contains(self, quantity: int) -> bool:
        if quantity < self.min_quantity:
            return False
        return self.max_quantity is None or quantity <= self.max_quantity


@dataclass
class BulkPricing:
    id: str
    name: str
    tiers: List[BulkPricingTier] = field(default_factory=list)
    description: str = ""
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "BulkPricing":
        return cls(
            id=to_str(row.get("id")),
            name=to_str(row.get("name")),
            tiers=[BulkPricingTier.from_row(to_mapping(t)) for t in to_list(row.get("tiers"))],
            description=to_str(row.get("description")),
            is_active=to_bool(row.get("is_active"), default=True),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "tiers": [t.to_row() for t in self.tiers],
            "is_active": self.is_active,
        }


@dataclass
class WholesaleAccount:
    id: str
    company_name: str
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    gst_number: str = ""
    discount_rate: float = 0.0
    credit_limit: float = 0.0
    payment_terms: str = "30 days"
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "WholesaleAccount":
        return cls(
            id=to_str(row.get("id")),
            company_name=to_str(row.get("company_name")),
            contact_person=to_str(row.get("contact_person")),
            email=to_str(row.get("email")),
            phone=to_str(row.get("phone")),
            address=to_str(row.get("address")),
            gst_number=to_str(row.get("gst_number")),
            discount_rate=to_float(row.get("discount_rate")),
            credit_limit=to_float(row.get("credit_limit")),
            payment_terms=to_str(row.get("payment_terms"), default="30 days") or "30 days",
            is_active=to_bool(row.get("is_active"), default=True),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "company_name": self.company_name,
            "contact_person": self.contact_person,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "gst_number": self.gst_number,
            "discount_rate": self.discount_rate,
            "credit_limit": self.credit_limit,
            "payment_terms": self.payment_terms,
            "is_active": self.is_active,
        }


# ---------------------------------------------------------------------------
# Combos
# ---------------------------------------------------------------------------

@dataclass
class ComboProduct:
    product_id: str
    product_name: str
    quantity: int
    price: float

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ComboProduct":
        return cls(
            product_id=to_str(row.get("product_id")),
            product_name=to_str(row.get("product_name")),
            quantity=to_int(row.get("quantity"), default=1),
            price=to_float(row.get("price")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price": self.price,
        }


@dataclass
class Combo:
    id: str
    name: str
    products: List[ComboProduct] = field(default_factory=list)
    description: str = ""
    original_price: float = 0.0
    combo_price: float = 0.0
    savings: float = 0.0
    image_url: str = ""
    is_active: bool = True
    is_featured: bool = False
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Combo":
        return cls(
            id=to_str(row.get("id")),
            name=to_str(row.get("name")),
            products=[ComboProduct.from_row(to_mapping(p)) for p in to_list(row.get("products"))],
            description=to_str(row.get("description")),
            original_price=to_float(row.get("original_price")),
            combo_price=to_float(row.get("combo_price")),
            savings=to_float(row.get("savings")),
            image_url=to_str(row.get("image_url")),
            is_active=to_bool(row.get("is_active"), default=True),
            is_featured=to_bool(row.get("is_featured")),
            valid_from=parse_timestamp(row.get("valid_from")),
            valid_until=parse_timestamp(row.get("valid_until")),
            created_at=parse_timestamp(row.get("created_at")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "products": [p.to_row() for p in self.products],
            "original_price": self.original_price,
            "combo_price": self.combo_price,
            "savings": self.savings,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "is_featured": self.is_featured,
            "valid_from": format_timestamp(self.valid_from),
            "valid_until": format_timestamp(self.valid_until),
        }


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass
class StoreSettings:
    store_name: str = "Smart Cleaners"
    store_description: str = "Premium quality cleaning products for every home and business"
    store_address: str = "123 Cleaning Street, Mumbai, Maharashtra 400001"
    store_phone: str = "+91 9876543210"
    store_email: str = "admin@smartcleaners.in"
    currency: str = "INR"
    timezone: str = "Asia/Kolkata"
    tax_rate: float = 18.0
    shipping_cost: float = 50.0
    free_shipping_threshold: float = 500.0


@dataclass
class NotificationSettings:
    email_notifications: bool = True
    order_notifications: bool = True
    stock_alerts: bool = True
    daily_reports: bool = False
    marketing_emails: bool = False


@dataclass
class SecuritySettings:
    two_factor_auth: bool = False
    session_timeout: int = 30
    password_expiry: int = 90
    login_attempts: int = 5


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------

@dataclass
class InvoiceLine:
    """
    One printed line of an invoice.
    """
    index: int  # 1-based
    name: str
    sku: str
    qty: int
    unit_price: float
    discount_per_unit: float
    line_total: float
    unit_price_display: str
    line_total_display: str


@dataclass
class Invoice:
    """
    Everything needed to print one order's invoice.
    """
    order_id: str
    issued_on: str
    store_name: str
    store_address: str
    store_phone: str
    customer_name: str
    customer_phone: str
    customer_address: str
    payment_method: str
    status: str
    tracking_number: str
    lines: List[InvoiceLine]
    subtotal: float
    bulk_discount_total: float
    shipping_cost: float
    final_total: float
