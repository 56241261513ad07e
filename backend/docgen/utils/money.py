"""Totals arithmetic and currency formatting shared by both render modes."""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")

PAYMENT_METHOD_LABELS = {
    "cash": "Cash",
    "check": "Check",
    "card": "Credit/Debit Card",
    "bank_transfer": "Bank Transfer (ACH)",
    "any": "Any Method Accepted",
}

# Methods recorded against individual payments (receipts)
RECEIPT_METHOD_LABELS = {
    "cash": "Cash",
    "check": "Check",
    "credit_debit": "Credit/Debit Card",
    "bank_payment": "Bank Payment",
    "zelle": "Zelle",
    "venmo": "Venmo",
    "paypal": "PayPal",
    "other": "Other",
}


def to_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount_type: str | None
    discount_value: Decimal
    discount_amount: Decimal
    tax: Decimal
    total: Decimal
    late_fee: Decimal

    @property
    def has_discount(self) -> bool:
        return self.discount_amount > 0

    @property
    def has_late_fee(self) -> bool:
        return self.late_fee > 0

    @property
    def total_due(self) -> Decimal:
        return self.total + self.late_fee


def line_total(quantity, unit_price) -> Decimal:
    return money(to_decimal(quantity) * to_decimal(unit_price))


def discount_amount(subtotal, discount_type: str | None, discount_value) -> Decimal:
    """Flat amount for ``amount`` discounts, otherwise a percentage of the subtotal."""
    value = to_decimal(discount_value)
    if value <= 0:
        return Decimal("0.00")
    if discount_type == "amount":
        return money(value)
    return money(to_decimal(subtotal) * value / Decimal(100))


def compute_totals(
    items: list | None,
    subtotal=None,
    discount_type: str | None = None,
    discount_value=None,
    tax=None,
    late_fee=None,
) -> Totals:
    """Compute document totals.

    When line items are present the subtotal is the sum of quantity x unit
    price over the items; the stored ``subtotal`` is only used for documents
    without items.
    """
    if items:
        sub = sum((line_total(i.quantity, i.unit_price) for i in items), Decimal("0.00"))
    else:
        sub = money(subtotal)
    disc = discount_amount(sub, discount_type, discount_value)
    tax_amount = money(tax)
    return Totals(
        subtotal=sub,
        discount_type=discount_type,
        discount_value=to_decimal(discount_value),
        discount_amount=disc,
        tax=tax_amount,
        total=sub - disc + tax_amount,
        late_fee=money(late_fee),
    )


def format_currency(amount) -> str:
    """en-US currency with digit grouping: ``$1,234.56``, ``-$5.00``."""
    value = money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_plain_currency(amount) -> str:
    """Two decimals with a leading symbol and no grouping: ``$1234.56``."""
    return f"${money(amount):.2f}"


def format_percent(value) -> str:
    return f"{to_decimal(value).normalize():f}%"


def payment_method_label(method: str | None) -> str:
    return PAYMENT_METHOD_LABELS.get(method or "any", PAYMENT_METHOD_LABELS["any"])


def receipt_method_label(method: str) -> str:
    return RECEIPT_METHOD_LABELS.get(method, method)


def payment_terms_label(days: int | None) -> str | None:
    if days is None:
        return None
    if days == 0:
        return "Due on Receipt"
    return f"Net {days} days"
