"""
Loads the username, ID, name history, skin and cape of Minecraft profiles by username or ID.

Since the Mojang API historically has been inconsistent on whether demo profiles are returned,
demo profiles are never returned by this package.

The Mojang API is rate limited. If heavy usage is expected, load profiles through a Store.
"""
from mcprofile.config import MAX_BATCH_SIZE
from mcprofile.errors import (
    UnexpectedFormatError,
    NoSuchProfileError,
    TooManyRequestsError,
    MaxSizeExceededError,
    IDNotSetError,
    NoCapeError,
)
from mcprofile.profile.builder import default_model
from mcprofile.profile.cache import Cache, CacheEntry, MemoryCache, Store
from mcprofile.profile.loader import ProfileLoader
from mcprofile.profile.structures import Model, PastName, Profile, Properties

__all__ = (
    "ProfileLoader",
    "Store",
    "Cache",
    "CacheEntry",
    "MemoryCache",
    "Profile",
    "PastName",
    "Properties",
    "Model",
    "MAX_BATCH_SIZE",
    "NoSuchProfileError",
    "TooManyRequestsError",
    "MaxSizeExceededError",
    "IDNotSetError",
    "NoCapeError",
    "UnexpectedFormatError",
    "default_model",
)
