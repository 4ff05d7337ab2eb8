"""Key pattern helpers shared by the Redis-protocol backends."""

# Keys deleted per DEL call during flush
DELETE_BATCH_SIZE = 1000

_GLOB_SPECIAL = "\\*?[]"


def escape_pattern(prefix: str) -> str:
    """Escape glob metacharacters so SCAN MATCH only sees the literal prefix."""
    return "".join("\\" + ch if ch in _GLOB_SPECIAL else ch for ch in prefix)


def prefix_pattern(prefix: str) -> str:
    """SCAN MATCH pattern for every key starting with prefix."""
    return escape_pattern(prefix) + "*"
