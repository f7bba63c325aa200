import datetime
from typing import Optional

from mcprofile.lib.db import queries
from mcprofile.profile.cache import Cache, CacheEntry


class TortoiseCache(Cache):
    """
    A Cache persisting profiles in the database opened by DatabaseManager.
    """

    async def get_name(self, name: str) -> Optional[CacheEntry]:
        return await queries.get_profile_by_name(name)

    async def get_name_at_time(self, name: str, at: datetime.datetime) -> Optional[CacheEntry]:
        return await queries.get_profile_by_name_at_time(name, at)

    async def get_id(self, id: str) -> Optional[CacheEntry]:
        return await queries.get_profile_by_id(id)

    async def cache(self, entry: CacheEntry) -> None:
        await queries.save_profile(entry)

    async def cache_name_at_time(self, name: str, at: datetime.datetime, id: str) -> None:
        await queries.save_name_at_time(name, at, id)
