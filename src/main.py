import argparse
import logging
import sys

from src.config import Settings
from src.relay.handler import WebhookRelay
from src.relay.server import RelayServer
from src.relay.signature import WebhookSignatureValidator
from src.senders.conversion import ConversionSender
from src.senders.gateway import GatewayClient
from src.senders.logger import DispatchLogger
from src.senders.orders import OrderTrackingSender
from src.store.status_store import InMemoryStatusStore, StatusStore

logger = logging.getLogger(__name__)


def build_conversion_sender(settings: Settings, dispatch_logger: DispatchLogger | None = None) -> ConversionSender:
    return ConversionSender(
        pixel_id=settings.pixel_id,
        access_token=settings.meta_access_token,
        base_url=settings.meta_base_url,
        api_version=settings.meta_api_version,
        event_source_url=settings.event_source_url,
        test_event_code=settings.test_event_code if settings.test_mode else None,
        deterministic_event_ids=settings.deterministic_event_ids,
        dispatch_logger=dispatch_logger,
        timeout_seconds=settings.outbound_timeout_seconds,
    )


def build_relay(
    settings: Settings,
    store: StatusStore | None = None,
    dispatch_logger: DispatchLogger | None = None,
) -> WebhookRelay:
    """Wire a WebhookRelay from settings."""
    if store is None:
        store = InMemoryStatusStore(
            ttl_seconds=settings.status_ttl_seconds,
            max_entries=settings.status_max_entries,
        )
    timeout = settings.outbound_timeout_seconds
    return WebhookRelay(
        conversion_sender=build_conversion_sender(settings, dispatch_logger),
        order_sender=OrderTrackingSender(
            url=settings.utmify_url,
            api_token=settings.utmify_token,
            dispatch_logger=dispatch_logger,
            timeout_seconds=timeout,
        ),
        store=store,
        gateway=GatewayClient(
            base_url=settings.gateway_base_url,
            secret_key=settings.gateway_secret_key,
            dispatch_logger=dispatch_logger,
            timeout_seconds=timeout,
        ),
        validator=WebhookSignatureValidator(settings.webhook_secret),
        platform=settings.order_platform,
        test_mode=settings.test_mode,
        service_name=settings.service_name,
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Payment webhook relay")
    parser.add_argument("--host", help="bind address (overrides HOST)")
    parser.add_argument("--port", type=int, help="listen port (overrides PORT)")
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="verify the conversions API credentials and exit",
    )
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if args.check_connection:
        result = build_conversion_sender(settings).test_connection()
        if result.success:
            logger.info("Conversions API reachable: %s", result.response)
            return 0
        logger.error("Conversions API check failed: %s %s", result.error, result.details or "")
        return 1

    relay = build_relay(settings)
    server = RelayServer(relay, host=args.host or settings.host, port=args.port or settings.port)
    logger.info("Test mode: %s", "on" if settings.test_mode else "off")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        relay.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
