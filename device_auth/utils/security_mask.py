def mask_sensitive_id(value: str) -> str:
    """Mask sensitive IDs showing only first and last 4 characters."""
    if not value or len(value) <= 8:
        return "***MASKED***"
    return f"{value[:4]}...{value[-4:]}"


def mask_user_code(user_code: str) -> str:
    """Mask a user code keeping only its first group, e.g. WDJB-****."""
    if not user_code:
        return "***EMPTY***"
    head, sep, tail = user_code.partition("-")
    if not sep:
        return f"{user_code[:2]}{'*' * (len(user_code) - 2)}" if len(user_code) > 2 else "***MASKED***"
    return f"{head}-{'*' * len(tail)}"
