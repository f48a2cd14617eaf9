import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    return int(value)


@dataclass
class Settings:
    """Runtime configuration for the relay.

    Every credential is optional: a missing token disables the sender that
    needs it instead of failing at startup.
    """

    pixel_id: str | None = None
    meta_access_token: str | None = None
    meta_api_version: str = "v18.0"
    meta_base_url: str = "https://graph.facebook.com"
    event_source_url: str = "https://your-domain.com"
    test_mode: bool = False
    test_event_code: str = "TEST12345"
    deterministic_event_ids: bool = False

    utmify_url: str = "https://api.utmify.com.br/api-credentials/orders"
    utmify_token: str | None = None
    order_platform: str = "NivoPay"

    gateway_base_url: str = "https://pay.nivopayoficial.com.br/api/v1"
    gateway_secret_key: str | None = None

    webhook_secret: str | None = None

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    service_name: str = "Meta Webhook Backend"

    status_ttl_seconds: int = 86400
    status_max_entries: int = 10000
    outbound_timeout_seconds: float = 10

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            pixel_id=os.getenv("META_PIXEL_ID") or None,
            meta_access_token=os.getenv("META_ACCESS_TOKEN") or None,
            meta_api_version=os.getenv("META_API_VERSION", cls.meta_api_version),
            meta_base_url=os.getenv("META_BASE_URL", cls.meta_base_url),
            event_source_url=os.getenv("META_EVENT_SOURCE_URL", cls.event_source_url),
            test_mode=_env_bool("TEST_MODE"),
            test_event_code=os.getenv("META_TEST_EVENT_CODE", cls.test_event_code),
            deterministic_event_ids=_env_bool("DETERMINISTIC_EVENT_IDS"),
            utmify_url=os.getenv("UTMIFY_API_URL", cls.utmify_url),
            utmify_token=os.getenv("UTMIFY_TOKEN") or None,
            order_platform=os.getenv("ORDER_PLATFORM", cls.order_platform),
            gateway_base_url=os.getenv("GATEWAY_BASE_URL", cls.gateway_base_url),
            gateway_secret_key=os.getenv("SECRET_KEY") or None,
            webhook_secret=os.getenv("WEBHOOK_SECRET") or None,
            host=os.getenv("HOST", cls.host),
            port=_env_int("PORT", cls.port),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            status_ttl_seconds=_env_int("STATUS_TTL_SECONDS", cls.status_ttl_seconds),
            status_max_entries=_env_int("STATUS_MAX_ENTRIES", cls.status_max_entries),
            outbound_timeout_seconds=float(
                os.getenv("OUTBOUND_TIMEOUT_SECONDS", cls.outbound_timeout_seconds)
            ),
        )
