import re
from datetime import datetime, timezone
from urllib.parse import parse_qsl

from src.models.order import OrderStatus

BRAZIL_COUNTRY_CODE = "55"

APPROVED_STATUSES = {"paid", "approved", "completed"}

UTM_KEYS = ("source", "medium", "campaign", "content", "term")

_STATUS_TABLE = {
    "APPROVED": OrderStatus.PAID,
    "PAID": OrderStatus.PAID,
    "COMPLETED": OrderStatus.PAID,
    "WAITING_PAYMENT": OrderStatus.WAITING_PAYMENT,
    "REFUNDED": OrderStatus.REFUNDED,
    "REFUSED": OrderStatus.REFUSED,
    "CHARGEDBACK": OrderStatus.CHARGEDBACK,
}

_NON_DIGITS = re.compile(r"\D")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def is_approved(status) -> bool:
    if not isinstance(status, str):
        return False
    return status.strip().lower() in APPROVED_STATUSES


def map_status(status) -> OrderStatus:
    """Map a gateway status onto the order-tracking vocabulary.

    Anything unrecognized is treated as not yet paid.
    """
    if not isinstance(status, str):
        return OrderStatus.WAITING_PAYMENT
    return _STATUS_TABLE.get(status.strip().upper(), OrderStatus.WAITING_PAYMENT)


def normalize_phone(phone) -> str | None:
    """Return the phone as country-code-prefixed digits without "+".

    This is the one internal representation; senders convert it at their
    own boundary (see to_e164).
    """
    if phone is None:
        return None
    digits = _NON_DIGITS.sub("", str(phone))
    if digits.startswith("0"):
        digits = digits[1:]
    if not digits:
        return None
    if not digits.startswith(BRAZIL_COUNTRY_CODE):
        digits = BRAZIL_COUNTRY_CODE + digits
    return digits


def to_e164(phone) -> str | None:
    normalized = normalize_phone(phone)
    if normalized is None:
        return None
    return "+" + normalized


def to_datetime(value) -> datetime:
    """Coerce a timestamp (ISO string, datetime, or epoch milliseconds) to an aware UTC datetime.

    Raises ValueError for anything unparseable.
    """
    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, bool):
            raise ValueError(f"invalid timestamp: {value!r}")
        elif isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        elif isinstance(value, str) and value.strip():
            parsed = datetime.fromisoformat(value.strip())
        else:
            raise ValueError(f"invalid timestamp: {value!r}")

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"timestamp out of range: {value!r}") from e


def format_date(value) -> str | None:
    """Render a timestamp as "YYYY-MM-DD HH:MM:SS" in UTC, or None when absent."""
    if value is None or value == "":
        return None
    return to_datetime(value).strftime(DATE_FORMAT)


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value)


def parse_utm(event: dict) -> dict[str, str]:
    """Extract the five UTM parameters from a gateway event.

    Accepts a query-string under "utm" and/or discrete utm_* fields; the
    discrete fields win. Missing values are empty strings.
    """
    from_string: dict[str, str] = {}
    raw = event.get("utm")
    if isinstance(raw, str) and raw:
        for key, value in parse_qsl(raw.lstrip("?"), keep_blank_values=True):
            key = key.strip().lower()
            if key.startswith("utm_"):
                key = key[len("utm_"):]
            if key in UTM_KEYS:
                from_string[key] = value

    tracking = event.get("trackingParameters")
    if not isinstance(tracking, dict):
        tracking = {}

    result = {}
    for key in UTM_KEYS:
        field = f"utm_{key}"
        discrete = event.get(field) or tracking.get(field)
        result[field] = _clean(discrete) if discrete else from_string.get(key, "")
    return result
