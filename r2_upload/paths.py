import datetime as dt
import random
import string

from .constants import RANDOM_SUFFIX_LENGTH
from .datamodel import as_utc
from .errors import InputError
from .signing import uri_encode

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
_DOT_SEGMENTS = ("", ".", "..")


def random_suffix(length: int = RANDOM_SUFFIX_LENGTH) -> str:
    # Collision avoidance only, not a secret.
    return "".join(random.choices(_SUFFIX_ALPHABET, k=length))


def file_extension(file_name: str) -> str:
    _, dot, extension = file_name.rpartition(".")
    return extension if dot else ""


def checked_folder(folder: str) -> str:
    # HTTP clients collapse dot segments, so the sent path would no longer
    # match the signed one.
    if any(segment in _DOT_SEGMENTS for segment in folder.split("/")):
        raise InputError(
            f"Invalid folder {folder!r}: empty, '.' and '..' segments are not allowed"
        )
    return folder


def build_storage_path(
    file_name: str, now: dt.datetime, folder: str | None = None
) -> str:
    millis = (as_utc(now) - _EPOCH) // dt.timedelta(milliseconds=1)
    generated = f"{millis}-{random_suffix()}"
    if extension := file_extension(file_name):
        generated = f"{generated}.{extension}"
    if folder and (folder := folder.strip("/")):
        return f"{checked_folder(folder)}/{generated}"
    return generated


def encode_storage_path(path: str) -> str:
    return "/".join(uri_encode(segment) for segment in path.split("/"))
