"""
Builds profile values out of JSON decoded from the Mojang API.

The functions here never perform I/O. Whenever the JSON does not have the expected structure
they raise UnknownFormatError; base64 and JSON decoding errors of property values propagate
unchanged. ProfileLoader turns both into an UnexpectedFormatError naming the endpoint.
"""
import base64
import datetime
import json
from typing import Any, Callable, Optional

from mcprofile.errors import NoSuchProfileError, UnknownFormatError
from mcprofile.profile.structures import Model, PastName, Profile, Properties

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)


def _require(value: Any, kind: type, what: str):
    # bool is an int subclass; never accept it where a number is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise UnknownFormatError(f"expected {what} to be {kind.__name__}, got {type(value).__name__}")
    return value


def _field(obj: dict, key: str, kind: type):
    if key not in obj:
        raise UnknownFormatError(f"missing field {key!r}")
    return _require(obj[key], kind, repr(key))


def _flag(obj: dict, key: str) -> bool:
    return key in obj and _require(obj[key], bool, repr(key))


def fill_profile(profile: Profile, payload: Any) -> Profile:
    """
    Fills out profile with the "id" and "name" of payload.

    Demo profiles are never returned: if payload has "demo" set, NoSuchProfileError is raised and
    profile is left untouched. Legacy accounts never migrated to Mojang accounts and can therefore
    not have changed username, so "legacy" gives the profile an empty name history unless one
    already was loaded.
    """
    payload = _require(payload, dict, "profile")
    if _flag(payload, "demo"):
        raise NoSuchProfileError()

    id = _field(payload, "id", str)
    name = _field(payload, "name", str)
    legacy = _flag(payload, "legacy")

    profile._id = id
    profile._name = name
    if legacy and profile._name_history is None:
        profile._name_history = ()
    return profile


def build_profile(payload: Any, source=None) -> Profile:
    return fill_profile(Profile(source=source), payload)


def ms_to_datetime(ms: int) -> datetime.datetime:
    try:
        return _EPOCH + datetime.timedelta(milliseconds=ms)
    except OverflowError as e:
        raise UnknownFormatError(f"timestamp {ms} ms out of range") from e


def build_history(entries: Any) -> tuple[str, Optional[tuple[PastName, ...]]]:
    """
    Creates the username history described by entries and returns it along with the current
    username.

    entries lists the usernames most recent first, starting with the current one. The
    "changedToAt" value of a past username is when the profile changed to the next username, i.e.
    when it stopped using that one. The history is returned in ascending order: earliest
    superseded username first.
    """
    entries = _require(entries, list, "name history")
    if not entries:
        return "", None

    current = _require(entries[0], dict, "name history entry")
    name = _field(current, "name", str)

    hist = []
    for entry in reversed(entries[1:]):
        entry = _require(entry, dict, "name history entry")
        until = None
        if "changedToAt" in entry:
            until = ms_to_datetime(_field(entry, "changedToAt", int))
        hist.append(PastName(_field(entry, "name", str), until))
    return name, tuple(hist)


def _is_even(c: str) -> bool:
    if "0" <= c <= "9":
        return (ord(c) & 1) == 0
    if "a" <= c <= "f":
        return (ord(c) & 1) == 1
    raise ValueError(f"invalid digit {c!r} in profile ID")


def default_model(profile_id: str) -> Model:
    """
    The model used by a profile which has not set a skin. Equivalent to the game's
    (uuid.hashCode() & 1) check, compacted to the parity of four hex digits.
    """
    uuid = profile_id.lower()
    if len(uuid) != 32:
        raise ValueError(f"profile ID {profile_id!r} is not 32 hex digits")
    if (_is_even(uuid[7]) != _is_even(uuid[16 + 7])) != (_is_even(uuid[15]) != _is_even(uuid[16 + 15])):
        return Model.ALEX
    return Model.STEVE


def populate_textures(encoded: str, props: dict) -> None:
    """
    Decodes the base64 encoded "textures" property and stores skin_url, cape_url and model in
    props.
    """
    textures_json = json.loads(base64.b64decode(encoded, validate=True))
    textures_json = _require(textures_json, dict, "textures property")
    textures = _field(textures_json, "textures", dict)

    if "SKIN" in textures:
        skin = _require(textures["SKIN"], dict, "SKIN")
        props["skin_url"] = _field(skin, "url", str)
        props["model"] = Model.STEVE
        if "metadata" in skin:
            metadata = _require(skin["metadata"], dict, "SKIN metadata")
            if metadata.get("model") == "slim":
                props["model"] = Model.ALEX
    else:
        props["model"] = default_model(_field(textures_json, "profileId", str))

    if "CAPE" in textures:
        cape = _require(textures["CAPE"], dict, "CAPE")
        props["cape_url"] = _field(cape, "url", str)


PROPERTY_POPULATORS: dict[str, Callable[[str, dict], None]] = {
    "textures": populate_textures,
}


def build_properties(pairs: Any) -> Properties:
    """
    Builds Properties out of the "properties" array of a profile. Properties with unknown names
    are ignored.
    """
    pairs = _require(pairs, list, "properties")
    props = {}
    for pair in pairs:
        pair = _require(pair, dict, "property")
        name = _field(pair, "name", str)
        value = _field(pair, "value", str)
        populate = PROPERTY_POPULATORS.get(name)
        if populate is not None:
            populate(value, props)
    return Properties(**props)


def build_profile_with_properties(payload: Any, source=None) -> Profile:
    profile = build_profile(payload, source)
    profile._properties = build_properties(_field(payload, "properties", list))
    return profile
