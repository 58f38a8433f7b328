"""Password hashing (bcrypt). Plaintext passwords never reach the database."""

import bcrypt

# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a password against a stored hash. Garbage hashes simply don't match."""
    try:
        return bcrypt.checkpw(_encode(password), hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
