"""
Fetch-and-Cache layer - in-memory copies of the Entity Store collections.

Each EntityCache holds one collection (problems or organizations) and
exposes {data, loading, create, refetch}. The filter and statistics engines
always receive `data`, which is a valid list even after a failed fetch.

EntityCacheRegistry shares one cache per entity kind between every consumer
of that kind. Consumers subscribe/release; the first subscriber triggers the
fetch and the cache is dropped when the last one releases, so concurrent
consumers never issue duplicate fetches.
"""

import logging
from typing import Dict, Generic, List, Optional, Protocol, TypeVar

from ecolink.core.errors import AuthenticationRequired, RemoteFailure
from ecolink.models.user import UserIdentity

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROBLEMS = "problems"
ORGANIZATIONS = "organizations"


class EntitySource(Protocol[T]):
    """What a cache needs from a store adapter."""

    def fetch_all(self) -> List[T]:
        ...

    def create(self, record, identity: Optional[UserIdentity]) -> T:
        ...


class EntityCache(Generic[T]):
    """
    Client-side state holder for one entity collection.

    Attributes:
        kind: Entity kind name, used in logs
        data: Last successfully fetched collection (empty until the first fetch)
        loading: True until the first fetch attempt finishes
        stale: True after a create; cleared by the next successful fetch
    """

    def __init__(self, kind: str, source: EntitySource[T]):
        self.kind = kind
        self.source = source
        self.data: List[T] = []
        self.loading = True
        self.stale = False
        self.last_error: Optional[str] = None

    def fetch_all(self) -> List[T]:
        """
        Load the collection from the store.

        A RemoteFailure is logged and the previous collection is kept
        (stale-but-present). loading is False afterwards either way.
        """
        try:
            self.data = list(self.source.fetch_all())
            self.stale = False
            self.last_error = None
            logger.info(f"Fetched {len(self.data)} {self.kind}")
        except RemoteFailure as e:
            self.last_error = e.message
            logger.error(f"Error fetching {self.kind}, keeping {len(self.data)} cached: {e.message}")
        finally:
            self.loading = False
        return self.data

    def refetch(self) -> List[T]:
        return self.fetch_all()

    def create(self, record, identity: Optional[UserIdentity]) -> T:
        """
        Insert a record through the source.

        The cached collection is NOT refreshed or modified; the cache is only
        marked stale and the caller decides when to refetch.

        Raises:
            AuthenticationRequired: no identity (checked before any store call)
            ValidationError, RemoteFailure: from the source
        """
        if identity is None:
            raise AuthenticationRequired()

        created = self.source.create(record, identity)
        self.stale = True
        return created


class EntityCacheRegistry:
    """
    One shared EntityCache per entity kind, reference-counted by subscribers.
    """

    def __init__(self, sources: Optional[Dict[str, EntitySource]] = None):
        self._sources: Dict[str, EntitySource] = dict(sources or {})
        self._caches: Dict[str, EntityCache] = {}
        self._subscribers: Dict[str, int] = {}

    def register_source(self, kind: str, source: EntitySource) -> None:
        self._sources[kind] = source

    def _source(self, kind: str) -> EntitySource:
        if kind not in self._sources:
            raise KeyError(f"No source registered for entity kind '{kind}'")
        return self._sources[kind]

    def subscribe(self, kind: str) -> EntityCache:
        """
        Get the shared cache for `kind`, fetching it if this is the first
        subscriber.
        """
        source = self._source(kind)

        cache = self._caches.get(kind)
        if cache is None:
            cache = EntityCache(kind, source)
            self._caches[kind] = cache
            self._subscribers[kind] = 0
            cache.fetch_all()

        self._subscribers[kind] += 1
        return cache

    def release(self, kind: str) -> None:
        """Drop one subscription; the cache is evicted with the last one."""
        count = self._subscribers.get(kind, 0)
        if count <= 1:
            self._subscribers.pop(kind, None)
            self._caches.pop(kind, None)
            return
        self._subscribers[kind] = count - 1

    def subscriber_count(self, kind: str) -> int:
        return self._subscribers.get(kind, 0)

    def create(self, kind: str, record, identity: Optional[UserIdentity]):
        """
        Insert a record of `kind` without subscribing.

        Nothing is fetched. A live shared cache for `kind` is marked stale
        so its subscribers know to refetch.

        Raises:
            AuthenticationRequired: no identity (checked before any store call)
            ValidationError, RemoteFailure: from the source
        """
        if identity is None:
            raise AuthenticationRequired()

        created = self._source(kind).create(record, identity)
        cache = self._caches.get(kind)
        if cache is not None:
            cache.stale = True
        return created


_registry = None


def get_cache_registry() -> EntityCacheRegistry:
    """
    Get or create the registry, wired to the Firestore-backed services.
    """
    global _registry
    if _registry is None:
        from ecolink.services.organization_service import get_organization_service
        from ecolink.services.problem_service import get_problem_service

        _registry = EntityCacheRegistry({
            PROBLEMS: get_problem_service(),
            ORGANIZATIONS: get_organization_service(),
        })
    return _registry


def reset_cache_registry() -> None:
    global _registry
    _registry = None
