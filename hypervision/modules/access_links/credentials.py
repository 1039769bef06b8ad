"""Link passwords: generation, bcrypt hashing and verification."""
import logging
import secrets

import bcrypt

from hypervision.core.exceptions import GenerationError, HashingError

logger = logging.getLogger(__name__)

# bcrypt work factor for stored link hashes (2^10 rounds).
BCRYPT_ROUNDS = 10

# Length of the password handed out when a link is created.
LINK_PASSWORD_LENGTH = 12


def generate_secret(length: int) -> str:
    """Return a URL-safe random string of exactly ``length`` characters."""
    if length < 1:
        raise ValueError("length must be a positive integer")
    try:
        # token_urlsafe(n) renders n random bytes as ceil(4n/3) >= n characters
        token = secrets.token_urlsafe(length)
    except (NotImplementedError, OSError) as e:
        logger.error(f"Entropy source unavailable: {e}")
        raise GenerationError(context={"reason": str(e)}) from e
    return token[:length]


def hash_secret(secret: str) -> str:
    """bcrypt hash with the salt and cost embedded in the returned string."""
    try:
        hashed = bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    except (ValueError, TypeError, AttributeError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise HashingError(context={"reason": str(e)}) from e
    return hashed.decode("utf-8")


def verify_secret(candidate: str, hashed: str) -> bool:
    """True when ``candidate`` matches ``hashed``. Never raises on bad input."""
    if not candidate or not hashed:
        return False
    try:
        return bcrypt.checkpw(candidate.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False
