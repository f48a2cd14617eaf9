import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from src.errors import ValidationError
from src.models.conversion import CanonicalCustomer, CanonicalTransaction, ConversionRecord
from src.models.order import Commission, OrderCustomer, OrderProduct, OrderRecord
from src.utils.normalize import format_date, map_status, normalize_phone, parse_utm

logger = logging.getLogger(__name__)

CURRENCY = "BRL"


def transaction_id_of(event: dict) -> str | None:
    value = event.get("id") or event.get("external_id")
    return str(value) if value else None


def _customer_source(event: dict) -> dict:
    customer = event.get("customer")
    if isinstance(customer, dict):
        return customer
    return event


def extract_customer(event: dict) -> CanonicalCustomer:
    source = _customer_source(event)
    email = source.get("email")
    name = source.get("name")
    if not email or not name:
        raise ValidationError("insufficient data: customer email and name are required")

    return CanonicalCustomer(
        email=str(email),
        name=str(name),
        phone=normalize_phone(source.get("phone")) or "",
        document=str(source.get("cpf") or source.get("document") or ""),
    )


def _amount_in_cents(event: dict) -> int | None:
    """Return the amount in minor units, or None when it is missing or not positive.

    Fractional cents are rejected rather than truncated.
    """
    amount = event.get("amount")
    if amount is None or isinstance(amount, bool):
        return None
    try:
        cents = Decimal(str(amount).strip())
    except InvalidOperation:
        return None
    if not cents.is_finite() or cents <= 0:
        return None
    if cents != cents.to_integral_value():
        raise ValidationError(f"insufficient data: amount must be a whole number of cents, got {amount!r}")
    return int(cents)


def extract_transaction(event: dict) -> CanonicalTransaction:
    amount = _amount_in_cents(event)
    if amount is None:
        raise ValidationError("insufficient data: a positive amount is required")

    timestamp = event.get("created_at") or event.get("createdAt")
    if not timestamp:
        timestamp = datetime.now(timezone.utc).isoformat()

    items = event.get("items")
    return CanonicalTransaction(
        transaction_id=transaction_id_of(event) or "",
        value=amount / 100,
        currency=CURRENCY,
        items=[item for item in items if isinstance(item, dict)] if isinstance(items, list) else [],
        timestamp=str(timestamp),
    )


def map_to_conversion(event: dict) -> ConversionRecord:
    """Build the conversion record; raises ValidationError when it would be unusable."""
    return ConversionRecord(
        customer=extract_customer(event),
        transaction=extract_transaction(event),
    )


def _safe_format(value, field: str, transaction_id: str) -> str | None:
    try:
        return format_date(value)
    except ValueError:
        logger.warning("Unparseable %s on transaction %s, sending null", field, transaction_id)
        return None


def _int_or_zero(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def map_to_order(event: dict, platform: str = "NivoPay", is_test: bool = False) -> OrderRecord:
    order_id = str(event.get("id") or event.get("customId") or event.get("external_id") or "")
    amount = _int_or_zero(event.get("amount"))

    created_at = _safe_format(event.get("createdAt") or event.get("created_at"), "createdAt", order_id)
    if created_at is None:
        created_at = format_date(datetime.now(timezone.utc))

    customer = event.get("customer") if isinstance(event.get("customer"), dict) else {}
    items = event.get("items") if isinstance(event.get("items"), list) else []

    products = [
        OrderProduct(
            id=str(item.get("id") or ""),
            name=str(item.get("title") or ""),
            quantity=_int_or_zero(item.get("quantity")) or 1,
            price_in_cents=_int_or_zero(item.get("unitPrice")) or amount,
        )
        for item in items
        if isinstance(item, dict)
    ]

    return OrderRecord(
        order_id=order_id,
        platform=platform,
        payment_method=str(event.get("method") or "pix"),
        status=map_status(event.get("status")),
        created_at=created_at,
        approved_date=_safe_format(
            event.get("approvedDate") or event.get("updatedAt") or event.get("updated_at"),
            "approvedDate",
            order_id,
        ),
        refunded_at=_safe_format(
            event.get("refundedAt") or event.get("refunded_at"), "refundedAt", order_id
        ),
        customer=OrderCustomer(
            name=str(customer.get("name") or ""),
            email=str(customer.get("email") or ""),
            phone=normalize_phone(customer.get("phone")) or "",
            document=str(customer.get("cpf") or customer.get("document") or ""),
        ),
        products=products,
        tracking_parameters=parse_utm(event),
        commission=Commission(
            total_price_in_cents=amount,
            gateway_fee_in_cents=_int_or_zero(event.get("gatewayFeeInCents")),
            user_commission_in_cents=_int_or_zero(event.get("userCommissionInCents")),
        ),
        is_test=bool(event.get("isTest")) or is_test,
    )
