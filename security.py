import hmac

import bcrypt

import config

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(raw: str) -> str:
    """Salted bcrypt hash of ``raw`` (BCRYPT_ROUNDS in .env)."""
    # bcrypt only looks at the first 72 bytes
    password_bytes = raw.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def is_password_hash(value: str) -> bool:
    return value.startswith(_BCRYPT_PREFIXES)


def verify_password(raw: str, stored: str) -> bool:
    """
    Check ``raw`` against a stored password.

    Records written before hashing was introduced still hold the plain text;
    those are compared in constant time so they keep working until the next
    successful login re-hashes them.
    """
    if not stored:
        return False
    if is_password_hash(stored):
        try:
            return bcrypt.checkpw(raw.encode("utf-8")[:72], stored.encode("utf-8"))
        except ValueError:
            # plain text that merely starts like a bcrypt hash
            pass
    return hmac.compare_digest(raw.encode("utf-8"), stored.encode("utf-8"))
