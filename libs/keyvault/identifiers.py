"""Secret name normalization for stores that only accept ``[A-Za-z0-9-]``."""

import re

_DISALLOWED = re.compile(r"[^A-Za-z0-9-]")


def normalize(secret_id: str, substitute: str = "-") -> str:
    """
    Map a logical secret name onto the store's identifier alphabet.

    Each ``/`` becomes two substitution characters so hierarchical names stay
    distinguishable from names that already contain the substitute; every other
    character outside ``[A-Za-z0-9-]`` becomes one substitution character.

    Example:
        >>> normalize("a/b/c")
        'a--b--c'
        >>> normalize("database.password")
        'database-password'
    """
    if len(substitute) != 1 or _DISALLOWED.match(substitute):
        raise ValueError(f"substitute must be a single character from [A-Za-z0-9-], got {substitute!r}")

    doubled = secret_id.replace("/", substitute * 2)
    return _DISALLOWED.sub(substitute, doubled)
