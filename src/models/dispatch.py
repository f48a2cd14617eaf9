from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DispatchTarget(Enum):
    CONVERSION = "conversion"
    ORDER = "order"
    GATEWAY = "gateway"


@dataclass
class DispatchAttempt:
    attempt_id: str
    target: DispatchTarget
    transaction_id: str
    url: str
    status_code: int | None
    timestamp: datetime
    response_time_ms: float
    error: str | None = None


@dataclass
class SendResult:
    success: bool
    event_id: str | None = None
    response: dict | None = None
    error: str | None = None
    details: object = None
