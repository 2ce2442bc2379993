"""Short code allocation against the record store."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.telemetry import get_meter, get_tracer
from shortener.repositories.url_repository import URLRepository
from shortener.services.codes import ShortCodeGenerator
from shortener.services.exceptions import ShortCodeGenerationError

logger = logging.getLogger(__name__)

tracer = get_tracer("url_shortener.allocator")
meter = get_meter("url_shortener.allocator")

collision_counter = meter.create_counter(
    name="url_shortener.short_code.collisions",
    description="Generated short codes that were already taken",
    unit="1",
)

DEFAULT_MAX_ATTEMPTS = 10


class ShortCodeAllocator:
    """
    Pick a short code that no stored record uses yet.

    Each attempt generates one candidate and performs one existence check;
    the first free candidate wins. The check is not atomic with the later
    insert, so the unique index on ``short_code`` remains the final word
    under concurrent allocations.
    """

    def __init__(
        self,
        url_repository: URLRepository,
        generator: ShortCodeGenerator,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.url_repository = url_repository
        self.generator = generator
        self.max_attempts = max_attempts

    async def allocate(self, db: AsyncSession) -> str:
        """
        Return a short code not present in the store.

        Raises:
            ShortCodeGenerationError: If every attempt collided
            RepositoryError: If an existence check fails
        """
        with tracer.start_as_current_span("allocate_short_code") as span:
            for attempt in range(1, self.max_attempts + 1):
                candidate = self.generator.generate()
                if not await self.url_repository.short_code_exists(db, candidate):
                    span.set_attribute("short_code.attempts", attempt)
                    return candidate

                collision_counter.add(1)
                logger.warning(f"Short code collision on attempt {attempt}/{self.max_attempts}: {candidate}")

            span.set_attribute("short_code.attempts", self.max_attempts)
            logger.error(f"Short code allocation exhausted after {self.max_attempts} attempts")
            raise ShortCodeGenerationError(
                f"Failed to generate a unique short code after {self.max_attempts} attempts."
            )
