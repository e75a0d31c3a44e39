"""
Business Repository - Abstraction Layer for Storage
====================================================

Provides a unified interface for storing businesses and their reviews.
The API and operations layers only talk to this interface, so storage can be
swapped without touching request handling.

USAGE:
    # In-memory (tests, local runs)
    repo = InMemoryRepository()

    # MongoDB
    repo = MongoRepository(settings.mongo)
    await repo.open()

    result = await repo.get_business("1")
    if isinstance(result, Success):
        print(result.value.name)

CONTRACT:
- Every method returns a result object, never raises for expected failures.
- get_business returns RecordNotFound for ids this store never issued.
- Storage failures are returned as DatabaseError wrapping the cause.
- Inputs are already validated; only storage-level constraints are checked.
"""

from abc import ABC, abstractmethod

from ...domain.models import (
    Business,
    CreateOnlineBusinessInput,
    CreatePhysicalBusinessInput,
    CreateReviewInput,
    OnlineBusiness,
    PhysicalBusiness,
    Review,
)
from ...domain.results import CreateResult, FetchResult


class BusinessRepository(ABC):
    """
    Abstract base class for business storage backends.
    Implement this interface to add new storage backends.
    """

    @abstractmethod
    async def create_online_business(
        self, data: CreateOnlineBusinessInput
    ) -> CreateResult[OnlineBusiness]:
        """Store a new online business and assign it an id."""
        ...

    @abstractmethod
    async def create_physical_business(
        self, data: CreatePhysicalBusinessInput
    ) -> CreateResult[PhysicalBusiness]:
        """Store a new physical business and assign it an id."""
        ...

    @abstractmethod
    async def get_business(self, business_id: str) -> FetchResult[Business]:
        """Fetch a business with its review figures."""
        ...

    @abstractmethod
    async def create_review(
        self, business_id: str, data: CreateReviewInput
    ) -> CreateResult[Review]:
        """Attach a review to an existing business and update its figures."""
        ...

    async def open(self) -> None:
        """Acquire backend resources. Called once at application startup."""
        return None

    async def close(self) -> None:
        """Release backend resources."""
        return None
