# complyark/utils/helpers.py
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from databases that drop the offset"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def mask_sensitive_data(data: str, visible_chars: int = 4, mask_char: str = "*") -> str:
    """
    Mask sensitive data for logging

    Args:
        data: The sensitive data to mask
        visible_chars: Number of characters to show at the beginning
        mask_char: Character to use for masking
    """
    if not data or len(data) <= visible_chars:
        return mask_char * len(data) if data else ""

    return data[:visible_chars] + mask_char * (len(data) - visible_chars)


def mask_email(email: str) -> str:
    """Mask the local part of an email address, keeping the domain"""
    if "@" not in email:
        return mask_sensitive_data(email, visible_chars=2)
    local, _, domain = email.partition("@")
    return f"{mask_sensitive_data(local, visible_chars=2)}@{domain}"
