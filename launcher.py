import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(".env")

from mcprofile import __version__
from mcprofile.errors import MCProfileError
from mcprofile.lib.db import DatabaseManager
from mcprofile.lib.db.cache import TortoiseCache
from mcprofile.logger import logger
from mcprofile.profile import Store
from mcprofile.transport import close_session
from mcprofile.versions import load_versions


async def show_versions() -> int:
    try:
        listing = await load_versions()
    except MCProfileError as e:
        logger.error(f"Failed to load versions: {e}")
        return 1
    finally:
        await close_session()
    print(f"latest release: {listing.latest_release}\nlatest snapshot: {listing.latest_snapshot}")
    return 0


async def main(names: list[str]) -> int:
    Path("data").mkdir(parents=True, exist_ok=True)
    async with DatabaseManager(generate_schemas=True):
        store = Store(TortoiseCache())
        try:
            profiles = await store.load_many(*names)
            for profile in profiles:
                history = await profile.load_name_history()
                properties = await profile.load_properties()
                past = ", ".join(p.name for p in history) or "-"
                print(f"{profile.name} ({profile.id}) model={properties.model} past names: {past}")
        except MCProfileError as e:
            logger.error(f"Failed to load profiles: {e}")
            return 1
        finally:
            await close_session()
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(f"mcprofile {__version__}\nusage: {sys.argv[0]} USERNAME...\n       {sys.argv[0]} --versions")
        sys.exit(2)
    if sys.argv[1] == "--versions":
        sys.exit(asyncio.run(show_versions()))
    sys.exit(asyncio.run(main(sys.argv[1:])))
