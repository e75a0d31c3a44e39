"""
Review Aggregation
==================

Pure functions that derive a business's review figures from its reviews:

- ``total_reviews``: number of reviews ever created
- ``avg_rating``: mean rating truncated (never rounded) to one decimal
- ``latest_reviews``: newest three reviews, newest first

Both repositories use these so their output stays identical.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from .models import Review

LATEST_REVIEWS_LIMIT = 3


def truncated_average(rating_sum: int, count: int) -> float:
    """
    floor(10 * rating_sum / count) / 10, computed with integers so that
    float error cannot push a value across a tenth boundary.
    Returns 0.0 when there are no reviews.
    """
    if count <= 0:
        return 0.0
    return ((10 * rating_sum) // count) / 10


def latest_reviews(reviews: Sequence[Review], limit: int = LATEST_REVIEWS_LIMIT) -> List[Review]:
    """
    Return the ``limit`` most recent reviews, newest first.

    ``reviews`` must be in insertion order. Reviews sharing a timestamp are
    ordered by insertion, the later one first.
    """
    ordered = sorted(
        enumerate(reviews),
        key=lambda item: (item[1].creation_date, item[0]),
        reverse=True,
    )
    return [review for _, review in ordered[:limit]]


@dataclass
class ReviewAggregate:
    """Running review figures for one business."""
    total_reviews: int = 0
    rating_sum: int = 0
    history: List[Review] = field(default_factory=list)

    def add(self, review: Review) -> None:
        self.history.append(review)
        self.total_reviews += 1
        self.rating_sum += review.rating

    @property
    def avg_rating(self) -> float:
        return truncated_average(self.rating_sum, self.total_reviews)

    @property
    def latest(self) -> List[Review]:
        return latest_reviews(self.history)
