from dataclasses import asdict, dataclass, field
from enum import Enum


class OrderStatus(Enum):
    PAID = "paid"
    WAITING_PAYMENT = "waiting_payment"
    REFUNDED = "refunded"
    REFUSED = "refused"
    CHARGEDBACK = "chargedback"


@dataclass
class OrderCustomer:
    name: str = ""
    email: str = ""
    phone: str = ""
    document: str = ""


@dataclass
class OrderProduct:
    id: str
    name: str
    quantity: int
    price_in_cents: int
    plan_id: str = ""
    plan_name: str = ""


@dataclass
class Commission:
    total_price_in_cents: int = 0
    gateway_fee_in_cents: int = 0
    user_commission_in_cents: int = 0


@dataclass
class OrderRecord:
    order_id: str
    platform: str
    payment_method: str
    status: OrderStatus
    created_at: str  # "YYYY-MM-DD HH:MM:SS"
    approved_date: str | None
    refunded_at: str | None
    customer: OrderCustomer
    products: list[OrderProduct] = field(default_factory=list)
    tracking_parameters: dict[str, str] = field(default_factory=dict)
    commission: Commission = field(default_factory=Commission)
    is_test: bool = False

    def to_payload(self) -> dict:
        """Render the record in the order-tracking API's camelCase wire shape."""
        return {
            "orderId": self.order_id,
            "platform": self.platform,
            "paymentMethod": self.payment_method,
            "status": self.status.value,
            "createdAt": self.created_at,
            "approvedDate": self.approved_date,
            "refundedAt": self.refunded_at,
            "customer": asdict(self.customer),
            "products": [
                {
                    "id": p.id,
                    "name": p.name,
                    "planId": p.plan_id,
                    "planName": p.plan_name,
                    "quantity": p.quantity,
                    "priceInCents": p.price_in_cents,
                }
                for p in self.products
            ],
            "trackingParameters": dict(self.tracking_parameters),
            "commission": {
                "totalPriceInCents": self.commission.total_price_in_cents,
                "gatewayFeeInCents": self.commission.gateway_fee_in_cents,
                "userCommissionInCents": self.commission.user_commission_in_cents,
            },
            "isTest": self.is_test,
        }
