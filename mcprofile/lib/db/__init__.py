from typing import Any, Optional

from tortoise import Tortoise

from mcprofile.config import CACHE_DB_URL
from mcprofile.logger import logger

MODULES = {"models": ["mcprofile.lib.db.schemes"]}


class DatabaseManager:
    """
    Opens and closes the Tortoise connection used by TortoiseCache.
    """
    _initialized = False

    def __init__(self, db_url: str = CACHE_DB_URL, modules: Optional[dict] = None, generate_schemas: bool = False):
        self.db_url = db_url
        self.modules = modules if modules is not None else MODULES
        self.generate_schemas = generate_schemas

    @property
    def initialized(self) -> bool:
        return DatabaseManager._initialized

    async def connect(self) -> None:
        if not DatabaseManager._initialized:
            await Tortoise.init(
                db_url=self.db_url,
                modules=self.modules
            )
            logger.debug("Database connection initialized with URL: %s", self.db_url)
            if self.generate_schemas:
                await Tortoise.generate_schemas(safe=True)
            DatabaseManager._initialized = True

    @staticmethod
    async def close() -> None:
        await Tortoise.close_connections()
        DatabaseManager._initialized = False
        logger.debug("Database connections closed")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_value: Any, tb: Any) -> None:
        await self.close()
