"""Test utilities for URL shortener tests."""

import random
import string
from typing import Optional

from shortener.models.url import UrlRecord


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8)}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


async def create_test_url(
    db,
    original_url: Optional[str] = None,
    short_code: Optional[str] = None,
) -> UrlRecord:
    """Create and persist a test record in the database."""
    record = UrlRecord.create(
        original_url=original_url or random_url(),
        short_code=short_code or random_string(7),
    )
    db.add(record.to_row())
    await db.flush()
    return record


class SequenceGenerator:
    """Code generator stand-in that hands out a fixed sequence of codes."""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def generate(self) -> str:
        code = self.codes[self.calls]
        self.calls += 1
        return code
