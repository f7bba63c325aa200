import datetime
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mcprofile.config import MAX_BATCH_SIZE
from mcprofile.errors import MaxSizeExceededError
from mcprofile.logger import logger
from mcprofile.profile.loader import ProfileLoader
from mcprofile.profile.structures import PastName, Profile, Properties, as_utc


def fold(name: str) -> str:
    """Usernames are case-insensitive, although case-preserving."""
    return name.casefold()


@dataclass(frozen=True)
class CacheEntry:
    """
    A cached profile. name_history and properties are None when not cached.
    """
    id: str
    name: str
    name_history: Optional[tuple[PastName, ...]] = None
    properties: Optional[Properties] = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "CacheEntry":
        return cls(profile.id, profile.name, profile.name_history, profile.properties)

    def to_profile(self, source=None) -> Profile:
        return Profile(self.id, self.name, self.name_history, self.properties, source=source)


class Cache(ABC):
    """
    A caching mechanism used by Store. Implementations are responsible for their own thread
    safety.

    Usernames must be compared ignoring case: "USER", "user" and "uSeR" are the same username.
    """

    @abstractmethod
    async def get_name(self, name: str) -> Optional[CacheEntry]:
        """Return the cached profile currently using name, or None."""

    @abstractmethod
    async def get_name_at_time(self, name: str, at: datetime.datetime) -> Optional[CacheEntry]:
        """Return the cached profile which used name at the instant at, or None."""

    @abstractmethod
    async def get_id(self, id: str) -> Optional[CacheEntry]:
        """Return the cached profile identified by id, or None."""

    @abstractmethod
    async def cache(self, entry: CacheEntry) -> None:
        """Cache entry, replacing any entry already cached for the same ID."""

    @abstractmethod
    async def cache_name_at_time(self, name: str, at: datetime.datetime, id: str) -> None:
        """Cache that name was used by the profile identified by id at the instant at.
        Such a mapping never becomes invalid."""


class MemoryCache(Cache):
    """
    A Cache keeping every entry in memory for the lifetime of the process.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}
        self._ids_by_name: dict[str, str] = {}
        self._ids_by_name_at_time: dict[tuple[str, datetime.datetime], str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get_name(self, name: str) -> Optional[CacheEntry]:
        with self._lock:
            id = self._ids_by_name.get(fold(name))
            return self._entries.get(id) if id is not None else None

    async def get_name_at_time(self, name: str, at: datetime.datetime) -> Optional[CacheEntry]:
        with self._lock:
            id = self._ids_by_name_at_time.get((fold(name), as_utc(at)))
            return self._entries.get(id) if id is not None else None

    async def get_id(self, id: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(id)

    async def cache(self, entry: CacheEntry) -> None:
        with self._lock:
            previous = self._entries.get(entry.id)
            if previous is not None and self._ids_by_name.get(fold(previous.name)) == entry.id:
                del self._ids_by_name[fold(previous.name)]
            self._entries[entry.id] = entry
            self._ids_by_name[fold(entry.name)] = entry.id

    async def cache_name_at_time(self, name: str, at: datetime.datetime, id: str) -> None:
        with self._lock:
            self._ids_by_name_at_time[(fold(name), as_utc(at))] = id


class Store:
    """
    Loads profiles like ProfileLoader, but first looks for them in cache.

    A cached entry is only used if it holds the information the method needs: ID and name for
    load, load_at_time, load_by_id and load_many; the name history for load_with_name_history;
    the properties for load_with_properties. Otherwise the profile is loaded from the Mojang
    servers and a snapshot of everything loaded replaces the cached entry. Failed loads cache
    nothing.

    Profiles returned by a Store use it when their name history or properties are loaded lazily.
    A Store without a cache simply passes every call on to its loader.
    """

    def __init__(self, cache: Optional[Cache], loader: Optional[ProfileLoader] = None):
        self.cache = cache
        self.loader = loader if loader is not None else ProfileLoader()

    def _from_cache(self, entry: CacheEntry) -> Profile:
        return entry.to_profile(source=self)

    async def _remember(self, profile: Profile) -> Profile:
        profile._source = self
        if self.cache is not None:
            await self.cache.cache(CacheEntry.from_profile(profile))
        return profile

    async def load(self, name: str) -> Profile:
        if self.cache is not None:
            entry = await self.cache.get_name(name)
            if entry is not None:
                logger.debug("Cache hit for name %s", name)
                return self._from_cache(entry)
        return await self._remember(await self.loader.load(name))

    async def load_at_time(self, name: str, at: datetime.datetime) -> Profile:
        if self.cache is not None:
            entry = await self.cache.get_name_at_time(name, at)
            if entry is not None:
                logger.debug("Cache hit for name %s at %s", name, at)
                return self._from_cache(entry)
        profile = await self._remember(await self.loader.load_at_time(name, at))
        if self.cache is not None:
            await self.cache.cache_name_at_time(name, at, profile.id)
        return profile

    async def _load_id(self, id: str, refresh: bool, sufficient, load) -> Profile:
        if self.cache is not None and not refresh:
            entry = await self.cache.get_id(id)
            if entry is not None and sufficient(entry):
                logger.debug("Cache hit for ID %s", id)
                return self._from_cache(entry)
        return await self._remember(await load(id))

    async def load_by_id(self, id: str, refresh: bool = False) -> Profile:
        return await self._load_id(id, refresh, lambda e: True, self.loader.load_by_id)

    async def load_with_name_history(self, id: str, refresh: bool = False) -> Profile:
        """
        If refresh is set the cache is not consulted, but the loaded profile is still cached.
        """
        return await self._load_id(
            id, refresh, lambda e: e.name_history is not None, self.loader.load_with_name_history
        )

    async def load_with_properties(self, id: str, refresh: bool = False) -> Profile:
        return await self._load_id(
            id, refresh, lambda e: e.properties is not None, self.loader.load_with_properties
        )

    async def load_many(self, *names: str) -> list[Profile]:
        if len(names) > MAX_BATCH_SIZE:
            raise MaxSizeExceededError(len(names))

        found: dict[str, Profile] = {}
        missing = []
        for name in dict.fromkeys(n for n in names if n):
            entry = await self.cache.get_name(name) if self.cache is not None else None
            if entry is not None:
                found.setdefault(entry.id, self._from_cache(entry))
            else:
                missing.append(name)

        if missing:
            for profile in await self.loader.load_many(*missing):
                found.setdefault(profile.id, await self._remember(profile))
        return list(found.values())
