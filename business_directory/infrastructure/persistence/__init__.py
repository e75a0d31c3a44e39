from ..config.settings import Settings
from .memory_store import InMemoryRepository
from .mongo_store import MongoRepository
from .repository import BusinessRepository


def build_repository(settings: Settings) -> BusinessRepository:
    """Create the repository selected by STORE_BACKEND."""
    if settings.store_backend == "mongo":
        return MongoRepository(settings.mongo)
    return InMemoryRepository()


__all__ = ["BusinessRepository", "InMemoryRepository", "MongoRepository", "build_repository"]
