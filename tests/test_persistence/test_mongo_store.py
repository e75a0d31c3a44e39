"""
Unit tests for the MongoDB repository.

Note: These tests use mocked async collections so no MongoDB server is
needed. They check the documents and update expressions sent to the driver
and how driver errors are reported.
"""

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError

from business_directory.domain.models import (
    CreateOnlineBusinessInput,
    CreatePhysicalBusinessInput,
    CreateReviewInput,
)
from business_directory.domain.results import DatabaseError, RecordNotFound, Success
from business_directory.infrastructure.config import MongoSettings
from business_directory.infrastructure.persistence import MongoRepository
from business_directory.infrastructure.persistence.mongo_store import to_business

OBJECT_ID = ObjectId("64b7f0c2a1b2c3d4e5f60718")
REVIEW_ID = ObjectId("64b7f0c2a1b2c3d4e5f60719")
REVIEW_TEXT = "super amazing business review that is long enough"
CREATED_AT = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

ONLINE = CreateOnlineBusinessInput(name="test online business", website="www.test.com", email="test@test.com")
PHYSICAL = CreatePhysicalBusinessInput(
    name="test physical business", address="123 test st", phone="1234567890", email="test@test.com"
)


def review_doc(rating: int, username: str = "test user") -> dict:
    return {
        "business_id": str(OBJECT_ID),
        "text": REVIEW_TEXT,
        "rating": rating,
        "username": username,
        "creation_date": CREATED_AT,
    }


@pytest.fixture
def businesses():
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=SimpleNamespace(inserted_id=OBJECT_ID))
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value={"_id": OBJECT_ID})
    return collection


@pytest.fixture
def reviews():
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=SimpleNamespace(inserted_id=REVIEW_ID))
    collection.delete_one = AsyncMock(return_value=SimpleNamespace(deleted_count=1))
    return collection


@pytest.fixture
def settings():
    return MongoSettings(host="localhost", port=27017, user="user", password="secret", database="directory")


@pytest.fixture
def repo(settings, businesses, reviews):
    repository = MongoRepository(settings)
    repository.bind(businesses, reviews)
    return repository


# ── Connection ─────────────────────────────────────────────────────

def test_open_pings_and_binds_collections(settings):
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.close = AsyncMock()
    database = MagicMock()
    client.__getitem__.return_value = database

    with patch(
        "business_directory.infrastructure.persistence.mongo_store.AsyncMongoClient",
        return_value=client,
    ) as client_cls:
        repository = MongoRepository(settings, database_name="directory_test")
        asyncio.run(repository.open())
        asyncio.run(repository.close())

    client_cls.assert_called_once_with(settings.url, tz_aware=True)
    client.admin.command.assert_awaited_once_with("ping")
    client.__getitem__.assert_called_once_with("directory_test")
    database.__getitem__.assert_any_call("business")
    database.__getitem__.assert_any_call("reviews")
    client.close.assert_awaited_once()


def test_close_without_open_is_noop(settings):
    asyncio.run(MongoRepository(settings).close())


# ── Businesses ─────────────────────────────────────────────────────

def test_create_online_business(repo, businesses):
    result = asyncio.run(repo.create_online_business(ONLINE))

    assert isinstance(result, Success)
    assert result.value.id == str(OBJECT_ID)
    assert result.value.website == "www.test.com"
    assert result.value.total_reviews == 0

    doc = businesses.insert_one.await_args.args[0]
    assert doc["type"] == "online"
    assert doc["name"] == "test online business"
    assert doc["total_reviews"] == 0
    assert doc["rating_sum"] == 0
    assert doc["latest_reviews"] == []


def test_create_physical_business(repo, businesses):
    result = asyncio.run(repo.create_physical_business(PHYSICAL))

    assert isinstance(result, Success)
    assert result.value.type == "physical"
    assert result.value.address == "123 test st"
    assert businesses.insert_one.await_args.args[0]["type"] == "physical"


def test_create_business_driver_error(repo, businesses):
    businesses.insert_one.side_effect = ServerSelectionTimeoutError("no servers")

    result = asyncio.run(repo.create_online_business(ONLINE))

    assert isinstance(result, DatabaseError)
    assert isinstance(result.error, ServerSelectionTimeoutError)


def test_get_business_with_reviews(repo, businesses):
    businesses.find_one.return_value = {
        "_id": OBJECT_ID,
        "type": "online",
        "name": "test online business",
        "website": "www.test.com",
        "email": "test@test.com",
        "total_reviews": 3,
        "rating_sum": 11,
        "latest_reviews": [review_doc(3), review_doc(3), review_doc(5)],
    }

    result = asyncio.run(repo.get_business(str(OBJECT_ID)))

    assert isinstance(result, Success)
    business = result.value
    assert business.id == str(OBJECT_ID)
    assert business.total_reviews == 3
    assert business.avg_rating == 3.6
    assert [r.rating for r in business.latest_reviews] == [3, 3, 5]
    businesses.find_one.assert_awaited_once_with({"_id": OBJECT_ID})


def test_get_business_not_found(repo, businesses):
    result = asyncio.run(repo.get_business(str(ObjectId())))
    assert isinstance(result, RecordNotFound)


@pytest.mark.parametrize("business_id", ["999", "1", "not-an-object-id", ""])
def test_get_business_malformed_id_is_not_found(repo, businesses, business_id):
    result = asyncio.run(repo.get_business(business_id))

    assert isinstance(result, RecordNotFound)
    businesses.find_one.assert_not_awaited()


def test_get_business_driver_error(repo, businesses):
    businesses.find_one.side_effect = AutoReconnect("connection reset")

    result = asyncio.run(repo.get_business(str(OBJECT_ID)))

    assert isinstance(result, DatabaseError)


@pytest.mark.parametrize("doc", [
    {"_id": OBJECT_ID, "type": "online", "name": "no website", "email": "test@test.com"},
    {"_id": OBJECT_ID, "type": "virtual", "name": "x", "email": "y"},
    {"_id": OBJECT_ID, "type": "online", "name": "x", "website": "w", "email": "e", "total_reviews": "many"},
])
def test_get_business_corrupt_document_is_database_error(repo, businesses, doc):
    businesses.find_one.return_value = doc

    result = asyncio.run(repo.get_business(str(OBJECT_ID)))

    assert isinstance(result, DatabaseError)


def test_to_business_physical_defaults():
    business = to_business({
        "_id": OBJECT_ID,
        "type": "physical",
        "name": "shop",
        "address": "1 main st",
        "phone": "555",
        "email": "shop@test.com",
    })

    assert business.type == "physical"
    assert business.total_reviews == 0
    assert business.avg_rating == 0
    assert business.latest_reviews == []


def test_to_business_unknown_type():
    with pytest.raises(ValueError, match="Unknown business type"):
        to_business({"_id": OBJECT_ID, "type": "virtual", "name": "x", "email": "y"})


# ── Reviews ────────────────────────────────────────────────────────

def test_create_review_updates_figures_atomically(repo, businesses, reviews):
    data = CreateReviewInput(text=REVIEW_TEXT, rating=4, username="test user")

    result = asyncio.run(repo.create_review(str(OBJECT_ID), data))

    assert isinstance(result, Success)
    assert result.value.rating == 4
    assert result.value.business_id == str(OBJECT_ID)

    query, update = businesses.find_one_and_update.await_args.args
    assert query == {"_id": OBJECT_ID}
    assert update["$inc"] == {"total_reviews": 1, "rating_sum": 4}
    push = update["$push"]["latest_reviews"]
    assert push["$position"] == 0
    assert push["$slice"] == 3
    assert push["$each"][0]["rating"] == 4
    assert push["$each"][0]["creation_date"] == result.value.creation_date

    stored = reviews.insert_one.await_args.args[0]
    assert stored["business_id"] == str(OBJECT_ID)
    assert stored["text"] == REVIEW_TEXT


def test_create_review_timestamp_has_millisecond_precision(repo):
    data = CreateReviewInput(text=REVIEW_TEXT, rating=2, username="test user")

    review = asyncio.run(repo.create_review(str(OBJECT_ID), data)).value

    assert review.creation_date.microsecond % 1000 == 0


def test_create_review_unknown_business(repo, businesses, reviews):
    businesses.find_one_and_update.return_value = None
    data = CreateReviewInput(text=REVIEW_TEXT, rating=4, username="test user")

    result = asyncio.run(repo.create_review(str(ObjectId()), data))

    assert isinstance(result, DatabaseError)
    assert isinstance(result.error, LookupError)
    reviews.delete_one.assert_awaited_once_with({"_id": REVIEW_ID})


def test_create_review_malformed_id(repo, businesses, reviews):
    data = CreateReviewInput(text=REVIEW_TEXT, rating=4, username="test user")

    result = asyncio.run(repo.create_review("999", data))

    assert isinstance(result, DatabaseError)
    reviews.insert_one.assert_not_awaited()
    businesses.find_one_and_update.assert_not_awaited()


def test_create_review_history_failure_leaves_figures_untouched(repo, businesses, reviews):
    reviews.insert_one.side_effect = AutoReconnect("connection reset")
    data = CreateReviewInput(text=REVIEW_TEXT, rating=4, username="test user")

    result = asyncio.run(repo.create_review(str(OBJECT_ID), data))

    assert isinstance(result, DatabaseError)
    assert isinstance(result.error, AutoReconnect)
    businesses.find_one_and_update.assert_not_awaited()
    reviews.delete_one.assert_not_awaited()


def test_create_review_figures_failure_discards_history(repo, businesses, reviews):
    businesses.find_one_and_update.side_effect = AutoReconnect("connection reset")
    data = CreateReviewInput(text=REVIEW_TEXT, rating=4, username="test user")

    result = asyncio.run(repo.create_review(str(OBJECT_ID), data))

    assert isinstance(result, DatabaseError)
    assert isinstance(result.error, AutoReconnect)
    reviews.insert_one.assert_awaited_once()
    reviews.delete_one.assert_awaited_once_with({"_id": REVIEW_ID})


def test_create_review_discard_failure_still_reports_original_error(repo, businesses, reviews):
    businesses.find_one_and_update.side_effect = AutoReconnect("connection reset")
    reviews.delete_one.side_effect = AutoReconnect("still down")
    data = CreateReviewInput(text=REVIEW_TEXT, rating=4, username="test user")

    result = asyncio.run(repo.create_review(str(OBJECT_ID), data))

    assert isinstance(result, DatabaseError)
    assert str(result.error) == "connection reset"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
