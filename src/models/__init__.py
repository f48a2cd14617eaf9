from .conversion import CanonicalCustomer, CanonicalTransaction, ConversionRecord
from .order import Commission, OrderCustomer, OrderProduct, OrderRecord, OrderStatus
from .status import StatusRecord
from .dispatch import DispatchAttempt, DispatchTarget, SendResult

__all__ = [
    "CanonicalCustomer", "CanonicalTransaction", "ConversionRecord",
    "Commission", "OrderCustomer", "OrderProduct", "OrderRecord", "OrderStatus",
    "StatusRecord",
    "DispatchAttempt", "DispatchTarget", "SendResult",
]
