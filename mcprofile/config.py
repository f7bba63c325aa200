import os

LOAD_URL = os.getenv("MCPROFILE_LOAD_URL", "https://api.mojang.com/users/profiles/minecraft/{name}")
LOAD_AT_TIME_URL = os.getenv(
    "MCPROFILE_LOAD_AT_TIME_URL", "https://api.mojang.com/users/profiles/minecraft/{name}?at={at}"
)
NAME_HISTORY_URL = os.getenv("MCPROFILE_NAME_HISTORY_URL", "https://api.mojang.com/user/profiles/{id}/names")
PROPERTIES_URL = os.getenv(
    "MCPROFILE_PROPERTIES_URL", "https://sessionserver.mojang.com/session/minecraft/profile/{id}"
)
LOAD_MANY_URL = os.getenv("MCPROFILE_LOAD_MANY_URL", "https://api.mojang.com/profiles/minecraft")
VERSIONS_URL = os.getenv(
    "MCPROFILE_VERSIONS_URL", "https://launchermeta.mojang.com/mc/game/version_manifest.json"
)

STEVE_SKIN_URL = "http://assets.mojang.com/SkinTemplates/steve.png"
ALEX_SKIN_URL = "http://assets.mojang.com/SkinTemplates/alex.png"

HTTP_TIMEOUT = float(os.getenv("MCPROFILE_HTTP_TIMEOUT", "30"))
HTTP_CONNECT_TIMEOUT = float(os.getenv("MCPROFILE_HTTP_CONNECT_TIMEOUT", "10"))
HTTP_POOL_LIMIT = int(os.getenv("MCPROFILE_HTTP_POOL_LIMIT", "100"))

CACHE_DB_URL = os.getenv("MCPROFILE_CACHE_DB_URL", "sqlite://data/mcprofile_cache.db")

MAX_BATCH_SIZE = 100
