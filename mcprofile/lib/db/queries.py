import datetime
from typing import Optional

from tortoise.transactions import in_transaction

from mcprofile.lib.db.schemes import CachedProfileSchema, CachedPastNameSchema, NameAtTimeSchema
from mcprofile.logger import logger
from mcprofile.profile.cache import CacheEntry, fold
from mcprofile.profile.structures import Model, PastName, Properties, as_utc

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)


def to_us(tm: datetime.datetime) -> int:
    return (as_utc(tm) - _EPOCH) // datetime.timedelta(microseconds=1)


def from_us(us: int) -> datetime.datetime:
    return _EPOCH + datetime.timedelta(microseconds=us)


async def to_entry(db_profile: CachedProfileSchema) -> CacheEntry:
    name_history = None
    if db_profile.has_name_history:
        past_names = await CachedPastNameSchema.filter(profile=db_profile).order_by("position").all()
        name_history = tuple(
            PastName(p.name, from_us(p.until_us) if p.until_us is not None else None)
            for p in past_names
        )
    properties = None
    if db_profile.has_properties:
        properties = Properties(
            skin_url=db_profile.skin_url,
            cape_url=db_profile.cape_url,
            model=Model(db_profile.model),
        )
    return CacheEntry(db_profile.profile_id, db_profile.name, name_history, properties)


async def get_profile_by_id(profile_id: str) -> Optional[CacheEntry]:
    db_profile = await CachedProfileSchema.get_or_none(profile_id=profile_id)
    if not db_profile:
        return None
    return await to_entry(db_profile)


async def get_profile_by_name(name: str) -> Optional[CacheEntry]:
    if not name:
        return None
    db_profile = await CachedProfileSchema.filter(folded_name=fold(name)).first()
    if not db_profile:
        return None
    return await to_entry(db_profile)


async def get_profile_by_name_at_time(name: str, at: datetime.datetime) -> Optional[CacheEntry]:
    mapping = await NameAtTimeSchema.get_or_none(folded_name=fold(name), at_us=to_us(at))
    if not mapping:
        return None
    return await get_profile_by_id(mapping.profile_id)


async def save_profile(entry: CacheEntry) -> CachedProfileSchema:
    """
    Replaces whatever is cached for entry.id with entry.
    """
    properties = entry.properties
    async with in_transaction():
        # another profile may have been cached under the same name before it was released
        await CachedProfileSchema.filter(folded_name=fold(entry.name)).exclude(
            profile_id=entry.id
        ).update(folded_name=None)
        db_profile, created = await CachedProfileSchema.update_or_create(
            profile_id=entry.id,
            defaults={
                "name": entry.name,
                "folded_name": fold(entry.name),
                "has_name_history": entry.name_history is not None,
                "has_properties": properties is not None,
                "skin_url": properties.skin_url if properties else "",
                "cape_url": properties.cape_url if properties else "",
                "model": properties.model if properties else None,
            }
        )
        await CachedPastNameSchema.filter(profile=db_profile).delete()
        if entry.name_history:
            await CachedPastNameSchema.bulk_create([
                CachedPastNameSchema(
                    profile=db_profile,
                    position=i,
                    name=past.name,
                    until_us=to_us(past.until) if past.until is not None else None,
                )
                for i, past in enumerate(entry.name_history)
            ])
    logger.debug(f"{'Cached' if created else 'Updated cached'} profile {entry.id} ({entry.name})")
    return db_profile


async def save_name_at_time(name: str, at: datetime.datetime, profile_id: str) -> NameAtTimeSchema:
    mapping, _ = await NameAtTimeSchema.get_or_create(
        folded_name=fold(name),
        at_us=to_us(at),
        defaults={"profile_id": profile_id}
    )
    return mapping
