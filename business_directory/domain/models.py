"""
Domain Models - Businesses, Reviews and Request Shapes
=======================================================

Two families of models live here:
- Request shapes (``Create*Input``): validate untrusted JSON bodies.
  Unknown fields are ignored, wrong types are rejected.
- Records (``OnlineBusiness``, ``PhysicalBusiness``, ``Review``): what the
  repositories hand back and what the API serializes.

Businesses are a tagged union on ``type``. Serializing a record emits the tag
plus the variant's fields at the top level.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

# Business rule limits
ONLINE_NAME_MAX_LENGTH = 75
PHYSICAL_NAME_MAX_LENGTH = 50
REVIEW_TEXT_MIN_LENGTH = 20
REVIEW_TEXT_MAX_LENGTH = 500
MIN_RATING = 1
MAX_RATING = 5


# ── Request shapes ─────────────────────────────────────────────────

class CreateOnlineBusinessInput(BaseModel):
    """Data needed to create an online business."""
    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    website: StrictStr
    email: StrictStr


class CreatePhysicalBusinessInput(BaseModel):
    """Data needed to create a physical business."""
    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    address: StrictStr
    phone: StrictStr
    email: StrictStr


class CreateOnlineBusinessRequest(BaseModel):
    type: Literal["online"]
    value: CreateOnlineBusinessInput


class CreatePhysicalBusinessRequest(BaseModel):
    type: Literal["physical"]
    value: CreatePhysicalBusinessInput


# Body of POST /business
CreateBusinessRequest = Annotated[
    Union[CreateOnlineBusinessRequest, CreatePhysicalBusinessRequest],
    Field(discriminator="type"),
]


class CreateReviewInput(BaseModel):
    """
    Body of POST /business/{id}/reviews.

    ``rating`` accepts any JSON number so that range and integer checks can
    report a precise message; the operations layer enforces both.
    """
    model_config = ConfigDict(extra="ignore")

    text: StrictStr
    rating: Union[StrictInt, StrictFloat]
    username: StrictStr


# ── Records ────────────────────────────────────────────────────────

class Review(BaseModel):
    """A stored review. ``creation_date`` is set by the repository."""
    business_id: str
    text: str
    rating: int
    username: str
    creation_date: datetime


class OnlineBusiness(BaseModel):
    type: Literal["online"] = "online"
    id: str
    name: str
    website: str
    email: str
    total_reviews: int = 0
    avg_rating: float = 0.0
    latest_reviews: List[Review] = Field(default_factory=list)


class PhysicalBusiness(BaseModel):
    type: Literal["physical"] = "physical"
    id: str
    name: str
    address: str
    phone: str
    email: str
    total_reviews: int = 0
    avg_rating: float = 0.0
    latest_reviews: List[Review] = Field(default_factory=list)


Business = Union[OnlineBusiness, PhysicalBusiness]
