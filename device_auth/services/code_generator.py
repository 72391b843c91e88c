"""
Device flow code generation.

Device codes are opaque 256-bit URL-safe tokens. User codes are short,
readable codes (e.g. WDJB-MJHT) that exclude the confusing characters
O, 0, I and 1.
"""

import secrets
import string

USER_CODE_ALPHABET = "".join(c for c in string.ascii_uppercase + string.digits if c not in "O0I1")
USER_CODE_LENGTH = 8
DEVICE_CODE_BYTES = 32


def generate_device_code() -> str:
    return secrets.token_urlsafe(DEVICE_CODE_BYTES)


def generate_user_code(length: int = USER_CODE_LENGTH) -> str:
    """
    Generate readable user code for device flow.

    Returns:
        Code with a hyphen between its two halves (XXXX-XXXX for the default length)
    """
    code = "".join(secrets.choice(USER_CODE_ALPHABET) for _ in range(length))
    half = length // 2
    return f"{code[:half]}-{code[half:]}"
