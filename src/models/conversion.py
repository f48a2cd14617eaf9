from dataclasses import dataclass, field


@dataclass
class CanonicalCustomer:
    email: str
    name: str
    phone: str = ""  # country-code-prefixed digits, no "+"
    document: str = ""


@dataclass
class CanonicalTransaction:
    transaction_id: str
    value: float  # decimal currency units
    currency: str
    items: list[dict] = field(default_factory=list)
    timestamp: str = ""  # ISO 8601


@dataclass
class ConversionRecord:
    customer: CanonicalCustomer
    transaction: CanonicalTransaction
