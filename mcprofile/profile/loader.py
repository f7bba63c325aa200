import binascii
import datetime
import math
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

from mcprofile.config import (
    LOAD_URL,
    LOAD_AT_TIME_URL,
    NAME_HISTORY_URL,
    PROPERTIES_URL,
    LOAD_MANY_URL,
    MAX_BATCH_SIZE,
)
from mcprofile.errors import (
    FailedRequestError,
    UnexpectedFormatError,
    UnknownFormatError,
    NoSuchProfileError,
    TooManyRequestsError,
    MaxSizeExceededError,
)
from mcprofile.logger import logger
from mcprofile.profile.builder import build_profile, build_profile_with_properties, build_history
from mcprofile.profile.structures import Profile, as_utc
from mcprofile.transport import JSONTransport

T = TypeVar("T")

NO_SUCH_PROFILE_STATUSES = (204, 404)
TOO_MANY_REQUESTS_CODE = "TooManyRequestsException"


def transform_error(err: FailedRequestError) -> Exception:
    if err.status in NO_SUCH_PROFILE_STATUSES:
        return NoSuchProfileError()
    if err.error_code == TOO_MANY_REQUESTS_CODE or err.status == 429:
        return TooManyRequestsError()
    return err


class ProfileLoader:
    """
    Loads profiles from the Mojang servers using transport, or a JSONTransport on the shared
    HTTP session if none is given.

    Each method raises NoSuchProfileError when the requested profile doesn't exist,
    TooManyRequestsError when rate limited and UnexpectedFormatError when a reply couldn't be
    understood. Network errors, timeouts and cancellation propagate as raised by aiohttp.
    """

    def __init__(self, transport: Optional[JSONTransport] = None):
        self.transport = transport if transport is not None else JSONTransport()

    async def _request(self, endpoint: str, parse: Callable[[Any], T], body: Any = None) -> T:
        try:
            if body is None:
                data = await self.transport.fetch_json(endpoint)
            else:
                data = await self.transport.exchange_json(endpoint, body)
        except FailedRequestError as e:
            err = transform_error(e)
            if err is e:
                raise
            raise err from e

        try:
            return parse(data)
        except (UnknownFormatError, binascii.Error, ValueError, OverflowError) as e:
            logger.error(f"Unexpected reply from {endpoint}: {e}")
            raise UnexpectedFormatError(endpoint, e) from e

    async def load(self, name: str) -> Profile:
        """
        Fetches the profile currently associated with name.
        """
        if not name:
            raise NoSuchProfileError()
        endpoint = LOAD_URL.format(name=quote(name, safe=""))
        return await self._request(endpoint, lambda data: build_profile(data, self))

    async def load_at_time(self, name: str, at: datetime.datetime) -> Profile:
        """
        Fetches the profile which was associated with name at the instant at.

        The returned profile has the current username of that profile, which differs from name
        if the profile has changed username since.
        """
        if not name:
            raise NoSuchProfileError()
        seconds = math.floor(as_utc(at).timestamp())
        endpoint = LOAD_AT_TIME_URL.format(name=quote(name, safe=""), at=seconds)
        return await self._request(endpoint, lambda data: build_profile(data, self))

    async def load_by_id(self, id: str) -> Profile:
        return await self.load_with_name_history(id)

    async def load_with_name_history(self, id: str) -> Profile:
        """
        Fetches the profile identified by id, incl. its name history.
        """
        if not id:
            raise NoSuchProfileError()
        endpoint = NAME_HISTORY_URL.format(id=quote(id, safe=""))
        name, hist = await self._request(endpoint, build_history)
        if not name:
            raise NoSuchProfileError()
        return Profile(id, name, name_history=hist, source=self)

    async def load_with_properties(self, id: str) -> Profile:
        """
        Fetches the profile identified by id, incl. its skin, cape and model.

        NB! Properties of a profile may only be requested once per minute.
        """
        if not id:
            raise NoSuchProfileError()
        endpoint = PROPERTIES_URL.format(id=quote(id, safe=""))
        return await self._request(endpoint, lambda data: build_profile_with_properties(data, self))

    async def load_many(self, *names: str) -> list[Profile]:
        """
        Fetches the profiles currently associated with names in one request.

        Usernames associated with no profile, and demo profiles, are absent from the result.
        Duplicate usernames are only returned once. At most MAX_BATCH_SIZE usernames may be
        requested at once, otherwise MaxSizeExceededError is raised before any request is made.
        """
        if len(names) > MAX_BATCH_SIZE:
            raise MaxSizeExceededError(len(names))

        unique = {}
        for name in names:
            # empty usernames are not accepted by the Mojang API
            if name:
                unique.setdefault(name.casefold(), name)
        if not unique:
            return []

        def parse(data: Any) -> list[Profile]:
            if not isinstance(data, list):
                raise UnknownFormatError(f"expected profile list, got {type(data).__name__}")
            profiles = {}
            for entry in data:
                try:
                    profile = build_profile(entry, self)
                except NoSuchProfileError:
                    logger.debug("Skipping demo profile in bulk reply")
                    continue
                profiles.setdefault(profile.id, profile)
            return list(profiles.values())

        return await self._request(LOAD_MANY_URL, parse, body=list(unique.values()))
