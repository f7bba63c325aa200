import datetime
import unittest

from fakes import FakeTransport
from mcprofile.config import VERSIONS_URL
from mcprofile.errors import FailedRequestError, UnexpectedFormatError
from mcprofile.versions import VersionType, Version, Listing, build_listing, load_versions

LISTING = {
    "latest": {"snapshot": "17w15a", "release": "1.11.2"},
    "versions": [
        {"id": "17w15a", "type": "snapshot", "releaseTime": "2017-04-12T09:30:50+00:00"},
        {"id": "1.11.2", "type": "release", "releaseTime": "2016-12-21T09:29:12+00:00"},
        {"id": "b1.8.1", "type": "old_beta", "releaseTime": "2011-09-18T22:00:00+00:00"},
        {"id": "rd-132211", "type": "old_alpha", "releaseTime": "2009-05-13T20:11:00+00:00"},
    ],
}


class TestBuildListing(unittest.TestCase):

    def test_build_listing(self):
        listing = build_listing(LISTING)
        self.assertEqual(len(listing.versions), 4)
        self.assertEqual(listing.latest_release, "1.11.2")
        self.assertEqual(listing.latest_snapshot, "17w15a")
        release = listing.latest_release_version()
        self.assertEqual(release.type, VersionType.RELEASE)
        self.assertEqual(release.released, datetime.datetime(2016, 12, 21, 9, 29, 12, tzinfo=datetime.UTC))
        self.assertEqual(listing.latest_snapshot_version().id, "17w15a")

    def test_version_type_names(self):
        self.assertEqual(str(VersionType.BETA), "beta")
        self.assertEqual(str(VersionType.ALPHA), "alpha")
        self.assertEqual(str(VersionType.RELEASE), "release")

    def test_unknown_type_kept(self):
        data = {
            "latest": {"snapshot": "x", "release": "x"},
            "versions": [{"id": "x", "type": "experiment", "releaseTime": "2020-01-01T00:00:00+00:00"}],
        }
        self.assertEqual(build_listing(data).versions["x"].type, "experiment")

    def test_missing_latest_version(self):
        listing = Listing({"1.0": Version("1.0", datetime.datetime.now(datetime.UTC), VersionType.RELEASE)},
                          latest_release="1.1", latest_snapshot="1.0")
        with self.assertRaises(LookupError):
            listing.latest_release_version()
        self.assertEqual(listing.latest_snapshot_version().id, "1.0")


class TestLoadVersions(unittest.IsolatedAsyncioTestCase):

    async def test_load_versions(self):
        transport = FakeTransport({VERSIONS_URL: LISTING})
        listing = await load_versions(transport)
        self.assertEqual(str(listing.latest_release_version()), "1.11.2")
        self.assertEqual(transport.requests, [("GET", VERSIONS_URL, None)])

    async def test_unexpected_format(self):
        for data in ({"versions": []}, {"latest": {}, "versions": []}, [],
                     {"latest": {"snapshot": "a", "release": "a"}, "versions": [{"id": "a"}]},
                     {"latest": {"snapshot": "a", "release": "a"},
                      "versions": [{"id": "a", "type": "release", "releaseTime": "yesterday"}]}):
            with self.subTest(data=data):
                with self.assertRaises(UnexpectedFormatError) as cm:
                    await load_versions(FakeTransport({VERSIONS_URL: data}))
                self.assertEqual(cm.exception.endpoint, VERSIONS_URL)

    async def test_failed_request(self):
        with self.assertRaises(FailedRequestError):
            await load_versions(FakeTransport())
