from dataclasses import dataclass, field

from fastapi import Depends
from sqlalchemy.orm import Session

from core.config import settings
from core.db import get_db
from repos.storage import CachingStorageAccessor, StorageAccessor
from services.aggregates import AggregateEngine
from services.loader import EntityLoader


@dataclass
class Context:
    """Per-request handle on storage, passed explicitly through resolution."""

    db: Session
    cache_enabled: bool = False
    storage: StorageAccessor = field(init=False)
    loader: EntityLoader = field(init=False)
    aggregates: AggregateEngine = field(init=False)

    def __post_init__(self):
        accessor = CachingStorageAccessor if self.cache_enabled else StorageAccessor
        self.storage = accessor(self.db)
        self.loader = EntityLoader(self.storage)
        self.aggregates = AggregateEngine(self.storage)


def get_context(db: Session = Depends(get_db)) -> Context:
    """FastAPI dependency building a fresh Context on the request's session."""
    return Context(db=db, cache_enabled=settings.QUERY_CACHE_ENABLED)
