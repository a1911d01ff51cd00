"""Random paste names and passwords."""

import secrets

from pastebin.core.constants import CHAR_GEN


def generate_random_string(length: int, alphabet: str = CHAR_GEN) -> str:
    """Return a random string drawn from alphabet with a CSPRNG.

    Args:
        length: Number of characters.
        alphabet: Characters to draw from; defaults to the unambiguous set.

    Returns:
        A new random string.
    """
    if length < 1:
        raise ValueError(f"length must be positive, got {length}")
    return "".join(secrets.choice(alphabet) for _ in range(length))
