import hashlib
import hmac
import json
import re


_HEX_SIGNATURE = re.compile(r"[0-9a-f]{64}")


def _to_bytes(payload: bytes | str | dict) -> bytes:
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")


def generate_signature(payload: bytes | str | dict, secret: str) -> str:
    """Generate the hex HMAC-SHA256 signature of a webhook body.

    Raw bytes are signed as-is; dicts are serialized compactly first.
    """
    return hmac.new(
        secret.encode("utf-8"),
        _to_bytes(payload),
        hashlib.sha256,
    ).hexdigest()


def verify_signature(payload: bytes | str | dict, secret: str, signature: str) -> bool:
    """Verify a hex HMAC-SHA256 signature, accepting an optional "sha256=" prefix."""
    provided = signature.strip()
    if provided.startswith("sha256="):
        provided = provided[len("sha256="):]
    provided = provided.lower()
    # compare_digest refuses non-ASCII str, so anything but hex is a mismatch
    if not _HEX_SIGNATURE.fullmatch(provided):
        return False
    expected = generate_signature(payload, secret)
    return hmac.compare_digest(expected, provided)


def hash_pii(value: str | None) -> str | None:
    """SHA-256 of the lowercased, trimmed value; None when there is nothing to hash."""
    if value is None:
        return None
    cleaned = str(value).strip().lower()
    if not cleaned:
        return None
    return hashlib.sha256(cleaned.encode("utf-8")).hexdigest()
