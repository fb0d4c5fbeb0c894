"""
Random password generation for create-on-miss.

Characters are drawn independently and uniformly with replacement from the
allowed alphabet using :mod:`secrets`, so the requested length may exceed the
alphabet size. Generated values are never logged.
"""

import logging
import secrets
import string

from libs.keyvault.exceptions import PolicyError
from libs.keyvault.models import PasswordPolicy

logger = logging.getLogger(__name__)

PUNCTUATION = string.punctuation


class PasswordGenerator:
    """Builds cryptographically random strings under a :class:`PasswordPolicy`."""

    def allowed_characters(self, policy: PasswordPolicy) -> str:
        """
        Return the effective alphabet for ``policy`` in a stable order.

        Raises:
            PolicyError: If every candidate character has been excluded
        """
        categories = [
            (string.ascii_uppercase, policy.exclude_uppercase),
            (string.ascii_lowercase, policy.exclude_lowercase),
            (string.digits, policy.exclude_numbers),
            (PUNCTUATION, policy.exclude_punctuation),
        ]
        base = "".join(chars for chars, excluded in categories if not excluded)
        if policy.include_space:
            base += " "

        excluded = set(policy.excluded_characters)
        alphabet = "".join(char for char in base if char not in excluded)

        if not alphabet:
            raise PolicyError(
                "Password policy excludes every character; "
                "relax exclude_* flags or excluded_characters"
            )
        return alphabet

    def generate(self, policy: PasswordPolicy) -> str:
        """
        Draw ``policy.length`` characters from the allowed alphabet.

        Args:
            policy: Length and character exclusions

        Returns:
            Random string; callers must treat it as a secret

        Raises:
            PolicyError: If every candidate character has been excluded
        """
        alphabet = self.allowed_characters(policy)
        logger.debug(
            "Generating password",
            extra={"length": policy.length, "alphabet_size": len(alphabet)},
        )
        return "".join(secrets.choice(alphabet) for _ in range(policy.length))


def generate_password(policy: PasswordPolicy | None = None) -> str:
    """Generate a password with the default generator (default policy if omitted)."""
    return PasswordGenerator().generate(policy or PasswordPolicy())
