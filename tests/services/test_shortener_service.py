"""Tests for the URL shortening service."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from shortener.models.url import URL_FORMAT_MESSAGE, URL_REQUIRED_MESSAGE, ShortURL
from shortener.repositories.base import DuplicateEntityError, RepositoryError
from shortener.services.allocator import ShortCodeAllocator
from shortener.services.codes import DEFAULT_ALPHABET, ShortCodeGenerator
from shortener.services.exceptions import (
    ErrorKind,
    ShortCodeConflictError,
    ShortCodeGenerationError,
    URLCreationError,
    URLLookupError,
)
from shortener.services.shortener import ShortenedURLService
from tests.utils import SequenceGenerator


@pytest.fixture
def mock_db():
    """Session stand-in; the transaction decorator awaits commit and rollback."""
    return AsyncMock()


@pytest.fixture
def mock_repository():
    repository = MagicMock()
    repository.short_code_exists = AsyncMock(return_value=False)
    repository.create_short_url = AsyncMock(side_effect=lambda db, record: record)
    repository.get_by_short_code = AsyncMock(return_value=None)
    return repository


def make_service(repository, generator=None):
    generator = generator or ShortCodeGenerator(rng=random.Random(3))
    return ShortenedURLService(repository, ShortCodeAllocator(repository, generator))


@pytest.mark.service
class TestCreateShortUrl:

    @pytest.mark.asyncio
    async def test_creates_record(self, mock_db, mock_repository):
        service = make_service(mock_repository)

        result = await service.create_short_url(mock_db, "https://www.example.com/some/long/path")

        assert result.ok
        record = result.value
        assert record.original_url == "https://www.example.com/some/long/path"
        assert len(record.short_code) == 7
        assert set(record.short_code) <= set(DEFAULT_ALPHABET)
        mock_repository.create_short_url.assert_awaited_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url,message", [
        (None, URL_REQUIRED_MESSAGE),
        ("", URL_REQUIRED_MESSAGE),
        ("not-a-valid-url", URL_FORMAT_MESSAGE),
        ("ftp://example.com/file", URL_FORMAT_MESSAGE),
        ("   ", URL_REQUIRED_MESSAGE),
        ("/relative/path", URL_FORMAT_MESSAGE),
    ])
    async def test_invalid_url_is_a_validation_failure(self, mock_db, mock_repository, url, message):
        service = make_service(mock_repository)

        result = await service.create_short_url(mock_db, url)

        assert not result.ok
        assert result.failure.kind == ErrorKind.VALIDATION
        assert result.failure.field_errors == {"originalUrl": [message]}
        mock_repository.short_code_exists.assert_not_awaited()
        mock_repository.create_short_url.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_collision_retries_with_new_candidate(self, mock_db, mock_repository):
        mock_repository.short_code_exists = AsyncMock(side_effect=[True, False])
        service = make_service(mock_repository, SequenceGenerator(["taken01", "fresh01"]))

        result = await service.create_short_url(mock_db, "https://example.com")

        assert result.value.short_code == "fresh01"
        assert mock_repository.short_code_exists.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion_stores_nothing(self, mock_db, mock_repository):
        mock_repository.short_code_exists = AsyncMock(return_value=True)
        service = make_service(mock_repository)

        with pytest.raises(ShortCodeGenerationError):
            await service.create_short_url(mock_db, "https://example.com")

        assert mock_repository.short_code_exists.await_count == 10
        mock_repository.create_short_url.assert_not_awaited()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_a_conflict(self, mock_db, mock_repository):
        mock_repository.create_short_url = AsyncMock(
            side_effect=DuplicateEntityError(ShortURL, "short_code", "raced01")
        )
        service = make_service(mock_repository)

        with pytest.raises(ShortCodeConflictError) as excinfo:
            await service.create_short_url(mock_db, "https://example.com")

        assert excinfo.value.kind == ErrorKind.CONFLICT
        assert "raced01" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_store_failure_is_a_storage_error(self, mock_db, mock_repository):
        mock_repository.create_short_url = AsyncMock(side_effect=RepositoryError("disk full"))
        service = make_service(mock_repository)

        with pytest.raises(URLCreationError) as excinfo:
            await service.create_short_url(mock_db, "https://example.com")

        assert excinfo.value.kind == ErrorKind.STORAGE
        mock_db.rollback.assert_awaited_once()


@pytest.mark.service
class TestGetUrlByCode:

    @pytest.mark.asyncio
    async def test_unknown_code_is_none(self, mock_db, mock_repository):
        service = make_service(mock_repository)
        assert await service.get_url_by_code(mock_db, "unknown123") is None

    @pytest.mark.asyncio
    async def test_store_failure_is_a_lookup_error(self, mock_db, mock_repository):
        mock_repository.get_by_short_code = AsyncMock(side_effect=RepositoryError("down"))
        service = make_service(mock_repository)

        with pytest.raises(URLLookupError) as excinfo:
            await service.get_url_by_code(mock_db, "abc1234")
        assert excinfo.value.kind == ErrorKind.STORAGE


@pytest.mark.service
class TestServiceWithDatabase:
    """Service behaviour against a real SQLite store."""

    @pytest.mark.asyncio
    async def test_create_then_lookup(self, test_db, url_repository):
        service = make_service(url_repository)

        created = (await service.create_short_url(test_db, "https://example.com/x")).value
        found = await service.get_url_by_code(test_db, created.short_code)

        assert found == created

    @pytest.mark.asyncio
    async def test_same_url_twice_gives_distinct_records(self, test_db, url_repository):
        service = make_service(url_repository)

        first = (await service.create_short_url(test_db, "https://example.com")).value
        second = (await service.create_short_url(test_db, "https://example.com")).value

        assert first.id != second.id
        assert first.short_code != second.short_code
        assert await url_repository.count(test_db) == 2

    @pytest.mark.asyncio
    async def test_invalid_input_persists_nothing(self, test_db, url_repository):
        service = make_service(url_repository)

        result = await service.create_short_url(test_db, "not-a-valid-url")

        assert not result.ok
        assert await url_repository.count(test_db) == 0

    @pytest.mark.asyncio
    async def test_single_symbol_alphabet_exhausts_after_first_record(self, test_db, url_repository):
        service = make_service(url_repository, ShortCodeGenerator(alphabet="a", length=7))

        first = await service.create_short_url(test_db, "https://example.com/1")
        assert first.value.short_code == "aaaaaaa"

        with pytest.raises(ShortCodeGenerationError):
            await service.create_short_url(test_db, "https://example.com/2")
        assert await url_repository.count(test_db) == 1

    @pytest.mark.asyncio
    async def test_existence_check_failure_is_a_creation_error(self, test_db, url_repository, monkeypatch):
        monkeypatch.setattr(test_db, "execute", AsyncMock(side_effect=SQLAlchemyError("gone")))
        service = make_service(url_repository)

        with pytest.raises(URLCreationError):
            await service.create_short_url(test_db, "https://example.com")
