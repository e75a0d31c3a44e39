"""
MongoDB Repository - Document Store Persistence
================================================

Collections:
- ``business``: one document per business, tagged with ``type``. Carries the
  running review figures (``total_reviews``, ``rating_sum``) and a copy of the
  newest reviews (``latest_reviews``, newest first, at most 3).
- ``reviews``: full review history, one document per review, keyed by
  ``business_id``.

The API never sees ``_id``; ids cross the boundary as ObjectId hex strings.

ARCHITECTURAL DECISION:
- Adding a review updates the business figures in ONE find_one_and_update
  ($inc + $push with $position/$slice). There is no read-modify-write round
  trip, so concurrent reviews on the same business cannot lose updates.
- The history insert happens first. The figures update doubles as the
  existence check for the business; when it fails or matches nothing, the
  history document is deleted again, so the figures never count a review
  that has no history entry.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import BSONError, InvalidId
from pydantic import ValidationError
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from ...domain.aggregation import LATEST_REVIEWS_LIMIT, truncated_average
from ...domain.models import (
    Business,
    CreateOnlineBusinessInput,
    CreatePhysicalBusinessInput,
    CreateReviewInput,
    OnlineBusiness,
    PhysicalBusiness,
    Review,
)
from ...domain.results import (
    CreateResult,
    DatabaseError,
    FetchResult,
    RecordNotFound,
    Success,
)
from ..config.settings import MongoSettings
from .repository import BusinessRepository

logger = logging.getLogger(__name__)

BUSINESS_COLLECTION = "business"
REVIEWS_COLLECTION = "reviews"

STORAGE_ERRORS = (PyMongoError, BSONError)
# A stored document that no longer matches the record shape
DECODE_ERRORS = (KeyError, TypeError, ValueError, ValidationError)


def _now() -> datetime:
    # BSON dates keep millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _review_from_doc(doc: Dict[str, Any]) -> Review:
    return Review(
        business_id=doc["business_id"],
        text=doc["text"],
        rating=doc["rating"],
        username=doc["username"],
        creation_date=doc["creation_date"],
    )


def to_business(doc: Dict[str, Any]) -> Business:
    """Convert a ``business`` document to its API record."""
    business_id = doc.get("_id")
    if business_id is None:
        raise ValueError("Business document has no _id")

    total_reviews = doc.get("total_reviews", 0)
    common = {
        "id": str(business_id),
        "name": doc["name"],
        "email": doc["email"],
        "total_reviews": total_reviews,
        "avg_rating": truncated_average(doc.get("rating_sum", 0), total_reviews),
        "latest_reviews": [_review_from_doc(r) for r in doc.get("latest_reviews", [])],
    }

    business_type = doc.get("type")
    if business_type == "online":
        return OnlineBusiness(website=doc["website"], **common)
    if business_type == "physical":
        return PhysicalBusiness(address=doc["address"], phone=doc["phone"], **common)

    raise ValueError(f"Unknown business type {business_type!r} in document {business_id}")


class MongoRepository(BusinessRepository):
    """
    MongoDB-backed repository.

    Usage:
        repo = MongoRepository(get_settings().mongo)
        await repo.open()
        ...
        await repo.close()
    """

    def __init__(self, settings: MongoSettings, database_name: Optional[str] = None):
        self._settings = settings
        self._database_name = database_name or settings.database
        self._client: Optional[AsyncMongoClient] = None
        self._businesses = None
        self._reviews = None

    async def open(self) -> None:
        """Connect, verify the server answers, and bind the collections."""
        self._client = AsyncMongoClient(self._settings.url, tz_aware=True)
        await self._client.admin.command("ping")
        database = self._client[self._database_name]
        self.bind(database[BUSINESS_COLLECTION], database[REVIEWS_COLLECTION])
        logger.info(
            f"Connected to MongoDB at {self._settings.host}:{self._settings.port}, "
            f"database '{self._database_name}'"
        )

    def bind(self, businesses, reviews) -> None:
        """Use the given collections for all operations."""
        self._businesses = businesses
        self._reviews = reviews

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")

    def _database_error(self, action: str, err: Exception) -> DatabaseError:
        logger.error(f"MongoDB {action} failed: {err}")
        return DatabaseError(err)

    # ── Businesses ─────────────────────────────────────────────────

    async def create_online_business(
        self, data: CreateOnlineBusinessInput
    ) -> CreateResult[OnlineBusiness]:
        doc = {
            "type": "online",
            "name": data.name,
            "website": data.website,
            "email": data.email,
            "total_reviews": 0,
            "rating_sum": 0,
            "latest_reviews": [],
        }
        try:
            inserted = await self._businesses.insert_one(doc)
        except STORAGE_ERRORS as e:
            return self._database_error("create online business", e)

        return Success(OnlineBusiness(
            id=str(inserted.inserted_id),
            name=data.name,
            website=data.website,
            email=data.email,
        ))

    async def create_physical_business(
        self, data: CreatePhysicalBusinessInput
    ) -> CreateResult[PhysicalBusiness]:
        doc = {
            "type": "physical",
            "name": data.name,
            "address": data.address,
            "phone": data.phone,
            "email": data.email,
            "total_reviews": 0,
            "rating_sum": 0,
            "latest_reviews": [],
        }
        try:
            inserted = await self._businesses.insert_one(doc)
        except STORAGE_ERRORS as e:
            return self._database_error("create physical business", e)

        return Success(PhysicalBusiness(
            id=str(inserted.inserted_id),
            name=data.name,
            address=data.address,
            phone=data.phone,
            email=data.email,
        ))

    async def get_business(self, business_id: str) -> FetchResult[Business]:
        try:
            object_id = ObjectId(business_id)
        except InvalidId:
            # Not an id this store could have issued
            return RecordNotFound()

        try:
            doc = await self._businesses.find_one({"_id": object_id})
        except STORAGE_ERRORS as e:
            return self._database_error(f"fetch business {business_id}", e)

        if doc is None:
            return RecordNotFound()

        try:
            business = to_business(doc)
        except DECODE_ERRORS as e:
            return self._database_error(f"decode business {business_id}", e)
        return Success(business)

    # ── Reviews ────────────────────────────────────────────────────

    async def create_review(
        self, business_id: str, data: CreateReviewInput
    ) -> CreateResult[Review]:
        try:
            object_id = ObjectId(business_id)
        except InvalidId as e:
            return self._database_error(f"create review for {business_id}", e)

        review = Review(
            business_id=business_id,
            text=data.text,
            rating=int(data.rating),
            username=data.username,
            creation_date=_now(),
        )
        review_doc = review.model_dump()
        action = f"create review for {business_id}"

        try:
            inserted = await self._reviews.insert_one(dict(review_doc))
        except STORAGE_ERRORS as e:
            return self._database_error(action, e)

        try:
            updated = await self._businesses.find_one_and_update(
                {"_id": object_id},
                {
                    "$inc": {"total_reviews": 1, "rating_sum": review.rating},
                    "$push": {
                        "latest_reviews": {
                            "$each": [review_doc],
                            "$position": 0,
                            "$slice": LATEST_REVIEWS_LIMIT,
                        }
                    },
                },
                projection={"_id": True},
            )
        except STORAGE_ERRORS as e:
            await self._discard_review(inserted.inserted_id)
            return self._database_error(action, e)

        if updated is None:
            await self._discard_review(inserted.inserted_id)
            return self._database_error(action, LookupError(f"Business {business_id} not found"))

        return Success(review)

    async def _discard_review(self, review_id: ObjectId) -> None:
        """Remove a history document whose business figures were never updated."""
        try:
            await self._reviews.delete_one({"_id": review_id})
        except STORAGE_ERRORS as e:
            logger.error(f"MongoDB could not discard orphan review {review_id}: {e}")
