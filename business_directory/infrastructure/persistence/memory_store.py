"""
In-Memory Repository
====================

Keeps every business and review in process memory. Nothing survives a
restart. Ids are issued from a per-instance counter: "1", "2", ...

Mutations never await, so on a single event loop each create call runs to
completion before another request can observe the store.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Union

from ...domain.aggregation import ReviewAggregate
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
from .repository import BusinessRepository

logger = logging.getLogger(__name__)


@dataclass
class _StoredBusiness:
    business: Union[OnlineBusiness, PhysicalBusiness]
    reviews: ReviewAggregate = field(default_factory=ReviewAggregate)

    def snapshot(self) -> Business:
        return self.business.model_copy(update={
            "total_reviews": self.reviews.total_reviews,
            "avg_rating": self.reviews.avg_rating,
            "latest_reviews": self.reviews.latest,
        })


class InMemoryRepository(BusinessRepository):
    """
    Dictionary-backed repository.

    Usage:
        repo = InMemoryRepository()
        created = await repo.create_online_business(data)
        fetched = await repo.get_business(created.value.id)
    """

    def __init__(self):
        self._businesses: Dict[str, _StoredBusiness] = {}
        self._next_id = 0

    def _issue_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    async def create_online_business(
        self, data: CreateOnlineBusinessInput
    ) -> CreateResult[OnlineBusiness]:
        business = OnlineBusiness(
            id=self._issue_id(),
            name=data.name,
            website=data.website,
            email=data.email,
        )
        self._businesses[business.id] = _StoredBusiness(business)
        return Success(business)

    async def create_physical_business(
        self, data: CreatePhysicalBusinessInput
    ) -> CreateResult[PhysicalBusiness]:
        business = PhysicalBusiness(
            id=self._issue_id(),
            name=data.name,
            address=data.address,
            phone=data.phone,
            email=data.email,
        )
        self._businesses[business.id] = _StoredBusiness(business)
        return Success(business)

    async def get_business(self, business_id: str) -> FetchResult[Business]:
        stored = self._businesses.get(business_id)
        if stored is None:
            return RecordNotFound()
        return Success(stored.snapshot())

    async def create_review(
        self, business_id: str, data: CreateReviewInput
    ) -> CreateResult[Review]:
        stored = self._businesses.get(business_id)
        if stored is None:
            logger.warning(f"Rejected review for unknown business {business_id}")
            return DatabaseError(LookupError(f"Business {business_id} not found"))

        review = Review(
            business_id=business_id,
            text=data.text,
            rating=int(data.rating),
            username=data.username,
            creation_date=datetime.now(timezone.utc),
        )
        stored.reviews.add(review)
        return Success(review)
