import json
from typing import Any, Optional

import aiohttp

from mcprofile.errors import FailedRequestError, UnexpectedFormatError
from mcprofile.logger import logger
from mcprofile.transport.http_session import get_session, close_session

__all__ = ("JSONTransport", "get_session", "close_session")


class JSONTransport:
    """
    Performs requests against the Mojang servers and decodes their JSON replies.

    A transport constructed without a session uses the shared session returned by
    get_session(). Every reply other than 200 OK raises a FailedRequestError, which carries the
    "error" and "errorMessage" fields of the service's error envelope when one was sent. This
    includes the other 2xx statuses: the Mojang API answers 204 No Content for unknown profiles,
    and ProfileLoader relies on receiving that as a FailedRequestError.

    Network errors, timeouts and cancellation are never caught here; they reach the caller as
    raised by aiohttp and asyncio.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session

    @property
    def session(self) -> aiohttp.ClientSession:
        return self._session if self._session is not None else get_session()

    async def fetch_json(self, endpoint: str) -> Any:
        """GET endpoint and return its decoded JSON body."""
        logger.debug("GET %s", endpoint)
        async with self.session.get(endpoint) as resp:
            body = await resp.read()
            return self._parse_response(body, resp.status, endpoint)

    async def exchange_json(self, endpoint: str, data: Any) -> Any:
        """POST data as JSON to endpoint and return the decoded JSON reply."""
        logger.debug("POST %s", endpoint)
        headers = {"Content-Type": "application/json"}
        async with self.session.post(endpoint, json=data, headers=headers) as resp:
            body = await resp.read()
            return self._parse_response(body, resp.status, endpoint)

    async def read(self, endpoint: str) -> bytes:
        """GET endpoint and return the raw body, e.g. a texture image."""
        logger.debug("GET %s", endpoint)
        async with self.session.get(endpoint) as resp:
            body = await resp.read()
            if resp.status != 200:
                logger.warning(f"Request to {endpoint} failed with status {resp.status}")
                raise FailedRequestError(endpoint, resp.status)
            return body

    # noinspection PyMethodMayBeStatic
    def _parse_response(self, body: bytes, status: int, endpoint: str) -> Any:
        try:
            data = json.loads(body) if body else None
            parse_error = None if body else ValueError("empty response body")
        except ValueError as e:
            data = None
            parse_error = e

        if status != 200:
            error_code = ""
            error_message = ""
            if isinstance(data, dict):
                if isinstance(data.get("error"), str):
                    error_code = data["error"]
                if isinstance(data.get("errorMessage"), str):
                    error_message = data["errorMessage"]
            err = FailedRequestError(endpoint, status, error_code, error_message)
            if status == 204:
                logger.debug("%s replied 204 No Content", endpoint)
            else:
                logger.warning(f"Request to {endpoint} failed -> {err.reason}")
            raise err

        if parse_error is not None:
            logger.error(f"Could not decode JSON reply from {endpoint}: {parse_error}")
            raise UnexpectedFormatError(endpoint, parse_error) from parse_error
        return data
