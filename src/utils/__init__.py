from .crypto import generate_signature, hash_pii, verify_signature
from .normalize import format_date, is_approved, map_status, normalize_phone, parse_utm

__all__ = [
    "generate_signature", "verify_signature", "hash_pii",
    "format_date", "is_approved", "map_status", "normalize_phone", "parse_utm",
]
