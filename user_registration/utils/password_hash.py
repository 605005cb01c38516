# password_hash.py
import logging

import bcrypt


logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72

_dummy_hashes: dict[int, bytes] = {}


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a bcrypt hash of ``password``; the random salt is embedded in the result."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def verify_password(password: str, hashed_password: str) -> bool:
    encoded = password.encode("utf-8")
    try:
        # Over-long input still pays for a full check so its timing matches a normal mismatch.
        ok = bcrypt.checkpw(encoded[:MAX_PASSWORD_BYTES], hashed_password.encode("ascii"))
    except ValueError:
        # Malformed stored hash.
        logger.warning("Password verification failed on an unusable stored hash")
        return False
    return ok and len(encoded) <= MAX_PASSWORD_BYTES


def burn_verification(password: str, rounds: int = DEFAULT_ROUNDS) -> None:
    """Spend the same bcrypt work as a real check when there is no stored hash to check against."""
    dummy = _dummy_hashes.get(rounds)
    if dummy is None:
        dummy = bcrypt.hashpw(b"placeholder", bcrypt.gensalt(rounds=rounds))
        _dummy_hashes[rounds] = dummy
    bcrypt.checkpw(password.encode("utf-8")[:MAX_PASSWORD_BYTES], dummy)
