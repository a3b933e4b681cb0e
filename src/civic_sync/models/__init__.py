"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from civic_sync.models.county import County, FallbackCounty
from civic_sync.models.official import FallbackOfficial, Official
from civic_sync.models.sync_log import SyncLog

__all__ = [
    "County",
    "FallbackCounty",
    "FallbackOfficial",
    "Official",
    "SyncLog",
]
