"""
Fetches Mojang's listing of Minecraft versions, allowing clients to determine what the latest
version of the game is.
"""
import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from mcprofile.config import VERSIONS_URL
from mcprofile.errors import UnexpectedFormatError, UnknownFormatError
from mcprofile.logger import logger
from mcprofile.transport import JSONTransport


class VersionType(str, Enum):
    RELEASE = "release"
    SNAPSHOT = "snapshot"
    ALPHA = "old_alpha"
    BETA = "old_beta"

    def __str__(self) -> str:
        return self.value.removeprefix("old_")


@dataclass(frozen=True)
class Version:
    id: str
    released: datetime.datetime
    # unknown release types are kept as the raw string
    type: VersionType | str

    def __str__(self) -> str:
        return self.id


@dataclass(frozen=True)
class Listing:
    versions: dict[str, Version] = field(default_factory=dict)
    latest_release: str = ""
    latest_snapshot: str = ""

    def latest_release_version(self) -> Version:
        try:
            return self.versions[self.latest_release]
        except KeyError:
            raise LookupError(f"listing does not contain its latest release {self.latest_release!r}") from None

    def latest_snapshot_version(self) -> Version:
        try:
            return self.versions[self.latest_snapshot]
        except KeyError:
            raise LookupError(f"listing does not contain its latest snapshot {self.latest_snapshot!r}") from None


def _get(obj: Any, key: str, kind: type):
    if not isinstance(obj, dict) or not isinstance(obj.get(key), kind):
        raise UnknownFormatError(f"expected {key!r} to be {kind.__name__}")
    return obj[key]


def _version_type(value: str) -> VersionType | str:
    try:
        return VersionType(value)
    except ValueError:
        return value


def build_version(data: Any) -> Version:
    return Version(
        id=_get(data, "id", str),
        released=datetime.datetime.fromisoformat(_get(data, "releaseTime", str)),
        type=_version_type(_get(data, "type", str)),
    )


def build_listing(data: Any) -> Listing:
    latest = _get(data, "latest", dict)
    versions = {}
    for entry in _get(data, "versions", list):
        version = build_version(entry)
        versions[version.id] = version
    return Listing(
        versions=versions,
        latest_release=_get(latest, "release", str),
        latest_snapshot=_get(latest, "snapshot", str),
    )


async def load_versions(transport: Optional[JSONTransport] = None) -> Listing:
    transport = transport if transport is not None else JSONTransport()
    data = await transport.fetch_json(VERSIONS_URL)
    try:
        listing = build_listing(data)
    except (UnknownFormatError, ValueError, OverflowError) as e:
        logger.error(f"Unexpected versions listing from {VERSIONS_URL}: {e}")
        raise UnexpectedFormatError(VERSIONS_URL, e) from e
    logger.debug("Loaded %d versions, latest release %s", len(listing.versions), listing.latest_release)
    return listing
