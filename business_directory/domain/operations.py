"""
Business Operations - Application Use Cases
============================================

Everything the API can do, independent of HTTP:
- create_business: check the name (non-empty, length per type), then store
- get_business:    fetch one business with its review figures
- create_review:   check text length and rating, then store

Each repository result is handled variant by variant. Failures surface as
DirectoryError subclasses that the web layer maps to status codes.
"""

import logging
from typing import Union

from ..infrastructure.persistence.repository import BusinessRepository
from .errors import BusinessNotFoundError, InvalidInputError, StorageError
from .models import (
    MAX_RATING,
    MIN_RATING,
    ONLINE_NAME_MAX_LENGTH,
    PHYSICAL_NAME_MAX_LENGTH,
    REVIEW_TEXT_MAX_LENGTH,
    REVIEW_TEXT_MIN_LENGTH,
    Business,
    CreateOnlineBusinessRequest,
    CreatePhysicalBusinessRequest,
    CreateReviewInput,
    Review,
)
from .results import DatabaseError, RecordNotFound, Success, assert_never

logger = logging.getLogger(__name__)


def check_business_name(name: str, max_length: int) -> None:
    """Raise InvalidInputError for a blank or overlong business name."""
    if not name.strip():
        raise InvalidInputError("Business name must not be empty")
    if len(name) > max_length:
        raise InvalidInputError(f"Business name is too long (maximum {max_length} characters)")


def check_review(data: CreateReviewInput) -> None:
    """Raise InvalidInputError if the review breaks a business rule."""
    if len(data.text) < REVIEW_TEXT_MIN_LENGTH:
        raise InvalidInputError(
            f"Review text is too short (minimum {REVIEW_TEXT_MIN_LENGTH} characters)"
        )
    if len(data.text) > REVIEW_TEXT_MAX_LENGTH:
        raise InvalidInputError(
            f"Review text is too long (maximum {REVIEW_TEXT_MAX_LENGTH} characters)"
        )

    if data.rating < MIN_RATING or data.rating > MAX_RATING:
        raise InvalidInputError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    if data.rating % 1 != 0:
        raise InvalidInputError("Rating must be an integer")


class BusinessOperations:
    """
    Use cases of the business directory.

    Usage:
        ops = BusinessOperations(InMemoryRepository())
        business = await ops.create_business(request)
        await ops.create_review(business.id, review_input)
    """

    def __init__(self, repository: BusinessRepository):
        self.repository = repository

    async def create_business(
        self,
        request: Union[CreateOnlineBusinessRequest, CreatePhysicalBusinessRequest],
    ) -> Business:
        if isinstance(request, CreateOnlineBusinessRequest):
            check_business_name(request.value.name, ONLINE_NAME_MAX_LENGTH)
            result = await self.repository.create_online_business(request.value)
        elif isinstance(request, CreatePhysicalBusinessRequest):
            check_business_name(request.value.name, PHYSICAL_NAME_MAX_LENGTH)
            result = await self.repository.create_physical_business(request.value)
        else:
            assert_never(request)

        if isinstance(result, DatabaseError):
            raise StorageError(result.error)
        if isinstance(result, Success):
            logger.info(f"Created new {result.value.type} business {result.value.id} ({result.value.name})")
            return result.value
        assert_never(result)

    async def get_business(self, business_id: str) -> Business:
        if not business_id or not business_id.strip():
            raise InvalidInputError("Missing business id")

        result = await self.repository.get_business(business_id)
        if isinstance(result, DatabaseError):
            raise StorageError(result.error)
        if isinstance(result, RecordNotFound):
            raise BusinessNotFoundError(f"Business {business_id} not found")
        if isinstance(result, Success):
            logger.info(f"Retrieved business {business_id}")
            return result.value
        assert_never(result)

    async def create_review(self, business_id: str, data: CreateReviewInput) -> Review:
        if not business_id or not business_id.strip():
            raise InvalidInputError("Missing business id")
        check_review(data)

        result = await self.repository.create_review(business_id, data)
        if isinstance(result, DatabaseError):
            raise StorageError(result.error)
        if isinstance(result, Success):
            logger.info(f"Created new review for business {business_id} (rating {result.value.rating})")
            return result.value
        assert_never(result)
