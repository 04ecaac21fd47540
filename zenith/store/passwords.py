"""
Password Verification

WARNING: This is NOT a cryptographic hash. It is the 32-bit rolling
string hash the browser app stored as `passwordHash`, kept so existing
data still verifies. Do not treat it as a security primitive.
"""

from zenith.models.entities import User


def simple_hash(text: str) -> str:
    """
    31-multiplier rolling hash over UTF-16 code units, as a signed 32-bit int.

    simple_hash("hello") == "99162322"
    """
    value = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code_unit = data[i] | (data[i + 1] << 8)
        value = ((value << 5) - value + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return str(value)


def verify_password(user: User, password: str) -> bool:
    """Check a plaintext password against the user's stored verifier."""
    return user.password_verifier == simple_hash(password)
