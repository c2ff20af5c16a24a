"""
Short code generation.

Codes are drawn uniformly at random; uniqueness is NOT checked here. The
store's primary key on `code` rejects duplicates and ShortenService retries.
"""

import random
import string


BASE62_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase


def generate_code(length: int) -> str:
    """Return `length` characters chosen independently from the base62 alphabet"""
    return ''.join(random.choice(BASE62_ALPHABET) for _ in range(length))


class RandomCodeGenerator:
    """
    Fixed-length random code generator.

    Pros: Stateless, no coordination between instances
    Cons: Collisions possible, rare at length 6 (62^6 ~ 5.7e10 codes)
    """

    def __init__(self, length: int = 6):
        if length < 1:
            raise ValueError(f"Code length must be positive, got {length}")
        self.length = length

    def generate(self) -> str:
        return generate_code(self.length)
