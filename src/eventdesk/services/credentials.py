"""Password hashing for restored user accounts.

Archive rows written before credential capture existed carry no password
hash. Restoring such a user with an empty credential would leave the account
unusable, so a fresh hash of a well-known placeholder secret is generated and
the account is flagged for a password reset.
"""

import logging

from argon2 import PasswordHasher

from eventdesk.config import settings

logger = logging.getLogger(__name__)

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with argon2id."""
    return _hasher.hash(password)


def has_credential(password_hash: str | None) -> bool:
    """Whether an archived credential hash can be restored as-is."""
    return bool(password_hash)


def reconstitute_password_hash(password_hash: str | None) -> tuple[str, bool]:
    """Return the hash to restore and whether the user must reset their password.

    Returns:
        Tuple of (password_hash, reset_required). The archived hash is returned
        unchanged when present; otherwise a new hash of the configured
        placeholder secret is returned with reset_required set.
    """
    if has_credential(password_hash):
        return password_hash, False
    logger.warning("Archived user has no credential hash; issuing placeholder credential")
    return hash_password(settings.restore_placeholder_password), True
