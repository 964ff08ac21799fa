from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns round-trip."""
    return datetime.now(UTC).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups (case-insensitive identity)."""
    return email.strip().lower()
