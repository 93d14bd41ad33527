TABLE_NAME = "folders"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards and the escape character itself so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    return f"%{escape_like(value)}%"
