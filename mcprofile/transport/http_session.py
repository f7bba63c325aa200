import aiohttp

from mcprofile.config import HTTP_TIMEOUT, HTTP_CONNECT_TIMEOUT, HTTP_POOL_LIMIT
from mcprofile.logger import logger

_session: aiohttp.ClientSession | None = None


def new_session() -> aiohttp.ClientSession:
    timeout = aiohttp.ClientTimeout(
        total=HTTP_TIMEOUT, connect=HTTP_CONNECT_TIMEOUT, sock_connect=HTTP_CONNECT_TIMEOUT
    )
    connector = aiohttp.TCPConnector(limit=HTTP_POOL_LIMIT, ttl_dns_cache=300)
    return aiohttp.ClientSession(
        timeout=timeout,
        connector=connector,
        headers={"Accept": "application/json"},
    )


def get_session() -> aiohttp.ClientSession:
    """
    Returns the process-wide session shared by every transport without a session of its own.
    A new session is created if none exists or the previous one was closed.
    """
    global _session
    if _session and not _session.closed:
        return _session
    _session = new_session()
    logger.debug("Created shared HTTP session")
    return _session


async def close_session():
    global _session
    if _session and not _session.closed:
        await _session.close()
        logger.debug("Closed shared HTTP session")
    _session = None
