"""Random short code generation."""

import random
import string
from typing import Optional

DEFAULT_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
DEFAULT_LENGTH = 7


class ShortCodeGenerator:
    """
    Produce fixed-length codes drawn uniformly from an alphabet.

    Every position is picked independently from the injected random source.
    The source only needs to be statistically uniform; codes are an address
    space, not a secret.
    """

    def __init__(
        self,
        alphabet: str = DEFAULT_ALPHABET,
        length: int = DEFAULT_LENGTH,
        rng: Optional[random.Random] = None,
    ):
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must not contain repeated characters")
        if length < 1:
            raise ValueError("length must be at least 1")

        self.alphabet = alphabet
        self.length = length
        self.rng = rng or random.Random()

    @property
    def capacity(self) -> int:
        """Number of distinct codes this generator can produce."""
        return len(self.alphabet) ** self.length

    def generate(self) -> str:
        """Return one random code."""
        return "".join(self.rng.choices(self.alphabet, k=self.length))
