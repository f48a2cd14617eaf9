from .conversion import ConversionSender
from .orders import OrderTrackingSender
from .gateway import GatewayClient
from .logger import DispatchLogger

__all__ = [
    "ConversionSender",
    "OrderTrackingSender",
    "GatewayClient",
    "DispatchLogger",
]
