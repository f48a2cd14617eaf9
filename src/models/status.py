from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class StatusRecord:
    status: str
    amount: int | None
    customer: dict | None
    items: list[dict] = field(default_factory=list)
    updated_at: datetime | None = None
    custom_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "amount": self.amount,
            "customer": self.customer,
            "items": self.items,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "customId": self.custom_id,
        }
