import uuid
from datetime import datetime, timezone


class GatewayEventFactory:
    """Factory for gateway-shaped payment-status payloads with sensible defaults."""

    @staticmethod
    def create_event(status: str = "paid", **overrides) -> dict:
        transaction_id = overrides.pop("id", f"txn_{uuid.uuid4().hex[:16]}")
        now = datetime.now(timezone.utc)
        amount = overrides.pop("amount", 1000)

        event = {
            "id": transaction_id,
            "customId": overrides.pop("customId", f"order_{uuid.uuid4().hex[:8]}"),
            "status": status,
            "method": "pix",
            "amount": amount,
            "created_at": now.isoformat(),
            "updated_at": now.isoformat(),
            "customer": GatewayEventFactory.create_customer(**overrides.pop("customer", {})),
            "items": overrides.pop("items", None)
            or [
                {
                    "id": "item_001",
                    "title": "Produto Teste",
                    "quantity": 1,
                    "unitPrice": amount,
                }
            ],
        }
        event.update(overrides)
        return event

    @staticmethod
    def create_customer(**overrides) -> dict:
        defaults = {
            "name": "Maria Silva",
            "email": "maria.silva@example.com",
            "phone": "(11) 99999-8888",
            "document": "12345678909",
        }
        defaults.update(overrides)
        return defaults
