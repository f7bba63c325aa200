import dotenv
dotenv.load_dotenv("../.env")

import datetime
import unittest

from tortoise import Tortoise

from fakes import FakeTransport, NERG_ID, NERG_NAME, NERG_HISTORY, HISTORY_URL
from mcprofile.lib.db.cache import TortoiseCache
from mcprofile.lib.db.queries import to_us, from_us
from mcprofile.lib.db.schemes import CachedProfileSchema, CachedPastNameSchema, NameAtTimeSchema
from mcprofile.profile import CacheEntry, PastName, Properties, Model, ProfileLoader, Store

PAST_TIME = datetime.datetime(2015, 4, 25, 22, 13, 20, 123456, tzinfo=datetime.UTC)


class TestTortoiseCache(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        await Tortoise.init(
            db_url="sqlite://:memory:",
            modules={"models": ["mcprofile.lib.db.schemes"]}
        )
        await Tortoise.generate_schemas()
        self.cache = TortoiseCache()

    async def asyncTearDown(self):
        await Tortoise.close_connections()

    async def test_cache_creates_records(self):
        history = (
            PastName("Sezuan", PAST_TIME),
            PastName("GeneralSezuan", PAST_TIME + datetime.timedelta(days=100)),
        )
        await self.cache.cache(CacheEntry(NERG_ID, NERG_NAME, name_history=history))
        self.assertTrue(await CachedProfileSchema.exists(profile_id=NERG_ID), "CachedProfileSchema not created")
        self.assertEqual(await CachedPastNameSchema.filter(profile_id=NERG_ID).count(), 2)

        entry = await self.cache.get_id(NERG_ID)
        self.assertEqual(entry.name_history, history)
        self.assertIsNone(entry.properties)

    async def test_round_trip_with_properties(self):
        entry = CacheEntry(NERG_ID, NERG_NAME, name_history=(), properties=Properties("skin", "", Model.ALEX))
        await self.cache.cache(entry)
        self.assertEqual(await self.cache.get_id(NERG_ID), entry)
        self.assertEqual(await self.cache.get_name("NERGALIC"), entry)

    async def test_not_loaded_stays_not_loaded(self):
        await self.cache.cache(CacheEntry(NERG_ID, NERG_NAME))
        entry = await self.cache.get_id(NERG_ID)
        self.assertIsNone(entry.name_history)
        self.assertIsNone(entry.properties)

    async def test_snapshot_replaced(self):
        await self.cache.cache(CacheEntry(NERG_ID, "GeneralSezuan", name_history=(PastName("Sezuan"),)))
        await self.cache.cache(CacheEntry(NERG_ID, NERG_NAME, properties=Properties()))
        entry = await self.cache.get_id(NERG_ID)
        self.assertEqual(entry.name, NERG_NAME)
        self.assertIsNone(entry.name_history)
        self.assertEqual(entry.properties, Properties())
        self.assertEqual(await CachedPastNameSchema.all().count(), 0)
        self.assertIsNone(await self.cache.get_name("GeneralSezuan"))

    async def test_released_name(self):
        other_id = "cabefc91b5df4c87886a6c604da2e46f"
        await self.cache.cache(CacheEntry(NERG_ID, "Taken"))
        await self.cache.cache(CacheEntry(other_id, "taken"))
        self.assertEqual((await self.cache.get_name("TAKEN")).id, other_id)
        self.assertEqual((await self.cache.get_id(NERG_ID)).name, "Taken")
        self.assertIsNone(await self.cache.get_name(""))

    async def test_name_at_time(self):
        await self.cache.cache(CacheEntry(NERG_ID, NERG_NAME))
        await self.cache.cache_name_at_time("GeneralSezuan", PAST_TIME, NERG_ID)
        await self.cache.cache_name_at_time("GeneralSezuan", PAST_TIME, NERG_ID)
        self.assertEqual(await NameAtTimeSchema.all().count(), 1)

        entry = await self.cache.get_name_at_time("generalsezuan", PAST_TIME)
        self.assertEqual(entry.id, NERG_ID)
        self.assertIsNone(await self.cache.get_name_at_time("GeneralSezuan", PAST_TIME + datetime.timedelta(microseconds=1)))

    async def test_misses(self):
        self.assertIsNone(await self.cache.get_id(NERG_ID))
        self.assertIsNone(await self.cache.get_name(NERG_NAME))
        self.assertIsNone(await self.cache.get_name_at_time(NERG_NAME, PAST_TIME))

    async def test_store_writes_through(self):
        transport = FakeTransport({HISTORY_URL.format(NERG_ID): NERG_HISTORY})
        store = Store(self.cache, ProfileLoader(transport))
        profile = await store.load_with_name_history(NERG_ID)
        again = await store.load_with_name_history(NERG_ID)
        self.assertEqual(again, profile)
        self.assertEqual(len(transport.requests), 1)

    def test_microseconds(self):
        self.assertEqual(from_us(to_us(PAST_TIME)), PAST_TIME)
        self.assertEqual(to_us(datetime.datetime(1970, 1, 1, 0, 0, 1)), 1_000_000)
