import asyncio
import datetime
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, NotRequired, Optional, TypedDict

from mcprofile.config import STEVE_SKIN_URL, ALEX_SKIN_URL
from mcprofile.errors import NoSuchProfileError, IDNotSetError, NoCapeError

if TYPE_CHECKING:
    from mcprofile.transport import JSONTransport


class ProfilePayload(TypedDict):
    """
    Basic profile information as returned by the name lookup endpoints.
    """
    id: str
    name: str
    legacy: NotRequired[bool]
    demo: NotRequired[bool]


class NameChangePayload(TypedDict):
    name: str
    changedToAt: NotRequired[int]  # ms since epoch


class PropertyPayload(TypedDict):
    name: str
    value: str  # base64 encoded JSON
    signature: NotRequired[str]


class ProfileWithPropertiesPayload(ProfilePayload):
    properties: list[PropertyPayload]


class Model(IntEnum):
    """
    The player model type used by a profile.
    """
    STEVE = 0  # classic
    ALEX = 1  # slim-armed

    def __str__(self) -> str:
        return self.name.capitalize()

    @property
    def default_skin_url(self) -> str:
        return ALEX_SKIN_URL if self is Model.ALEX else STEVE_SKIN_URL


def as_utc(tm: datetime.datetime) -> datetime.datetime:
    """Naive datetimes are taken to be in UTC."""
    if tm.tzinfo is None:
        return tm.replace(tzinfo=datetime.UTC)
    return tm.astimezone(datetime.UTC)


@dataclass(frozen=True)
class PastName:
    """
    One of a profile's past usernames.

    until is the instant the profile stopped using name, or None if unknown. Two PastName values
    are equal if their names match and until denotes the same instant, whatever its time zone.
    """
    name: str
    until: Optional[datetime.datetime] = None

    def __post_init__(self):
        if self.until is not None:
            object.__setattr__(self, "until", as_utc(self.until))

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Properties:
    """
    Skin, cape and model used by a profile.

    An empty skin_url means no custom skin is set and the default skin for model is used.
    An empty cape_url means the profile has no cape.
    """
    skin_url: str = ""
    cape_url: str = ""
    model: Model = Model.STEVE

    @property
    def skin_texture_url(self) -> str:
        return self.skin_url or self.model.default_skin_url

    async def read_skin(self, transport: Optional["JSONTransport"] = None) -> bytes:
        """Fetch the skin texture, or the default texture for model if no skin is set."""
        return await _transport(transport).read(self.skin_texture_url)

    async def read_cape(self, transport: Optional["JSONTransport"] = None) -> bytes:
        if not self.cape_url:
            raise NoCapeError()
        return await _transport(transport).read(self.cape_url)


def _transport(transport: Optional["JSONTransport"]) -> "JSONTransport":
    if transport is not None:
        return transport
    from mcprofile.transport import JSONTransport
    return JSONTransport()


class Profile:
    """
    The profile of a Minecraft account.

    name_history and properties are None until loaded. A loaded name history is a tuple of
    PastName values, earliest superseded username first and most recently superseded last;
    the empty tuple means the profile is known to have no past usernames.

    Only load_name_history and load_properties modify a profile. Both are serialized by a lock
    owned by the profile, so they may be awaited concurrently on the same instance.
    """

    __hash__ = None

    def __init__(
            self,
            id: str = "",
            name: str = "",
            name_history: Optional[tuple[PastName, ...]] = None,
            properties: Optional[Properties] = None,
            source=None,
    ):
        self._id = id
        self._name = name
        self._name_history = tuple(name_history) if name_history is not None else None
        self._properties = properties
        # ProfileLoader or Store used for lazy loading
        self._source = source
        self._lock = asyncio.Lock()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def name_history(self) -> Optional[tuple[PastName, ...]]:
        return self._name_history

    @property
    def properties(self) -> Optional[Properties]:
        return self._properties

    def copy(self) -> "Profile":
        return Profile(self._id, self._name, self._name_history, self._properties, self._source)

    async def load_name_history(self, force: bool = False) -> Optional[tuple[PastName, ...]]:
        """
        Loads and returns the profile's past usernames. If force is False the history is only
        loaded when not already present. On success, name is updated as well since it may have
        changed.

        If loading fails the error is raised and name_history keeps its previous value.
        Raises IDNotSetError if the profile has no ID.
        """
        async with self._lock:
            if self._name_history is None or force:
                loaded = await self._reload("load_with_name_history", force)
                self._name = loaded.name
                self._name_history = loaded.name_history
            return self._name_history

    async def load_properties(self, force: bool = False) -> Optional[Properties]:
        """
        Loads and returns the profile's skin, cape and model. Works like load_name_history.

        NB! Properties of a profile may only be requested once per minute.
        """
        async with self._lock:
            if self._properties is None or force:
                loaded = await self._reload("load_with_properties", force)
                self._name = loaded.name
                self._properties = loaded.properties
            return self._properties

    async def _reload(self, operation: str, force: bool) -> "Profile":
        from mcprofile.profile.loader import ProfileLoader
        from mcprofile.profile.cache import Store

        source = self._source if self._source is not None else ProfileLoader()
        try:
            if isinstance(source, Store):
                return await getattr(source, operation)(self._id, refresh=force)
            return await getattr(source, operation)(self._id)
        except NoSuchProfileError as e:
            if not self._id:
                raise IDNotSetError() from e
            raise

    def __eq__(self, other):
        if not isinstance(other, Profile):
            return NotImplemented
        return (
                self._id == other._id
                and self._name == other._name
                and self._name_history == other._name_history
                and self._properties == other._properties
        )

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return (
            f"Profile(id={self._id!r}, name={self._name!r}, "
            f"name_history={self._name_history!r}, properties={self._properties!r})"
        )
