import datetime as dt
import re
from urllib.parse import unquote

import pytest
import requests

from r2_upload.errors import InputError
from r2_upload.paths import (
    build_storage_path,
    encode_storage_path,
    file_extension,
    random_suffix,
)

NOW = dt.datetime(2024, 1, 1, 0, 0, 0, tzinfo=dt.timezone.utc)
GENERATED_NAME = re.compile(r"^(?P<millis>\d+)-(?P<suffix>[a-z0-9]{13})\.(?P<ext>\w+)$")


def test_generated_name_shape() -> None:
    match = GENERATED_NAME.match(build_storage_path("receipt.pdf", NOW))
    assert match is not None
    assert int(match.group("millis")) == 1704067200000
    assert match.group("ext") == "pdf"


def test_folder_prefix() -> None:
    path = build_storage_path("photo.JPG", NOW, "weekly-reports")
    folder, _, name = path.rpartition("/")
    assert folder == "weekly-reports"
    assert GENERATED_NAME.match(name)
    assert name.endswith(".JPG")


@pytest.mark.parametrize(
    ("folder", "expected_prefix"),
    [
        ("/tuition-receipts/", "tuition-receipts/"),
        ("students/2024", "students/2024/"),
        ("", ""),
        (None, ""),
        ("/", ""),
    ],
)
def test_folder_normalization(folder: str | None, expected_prefix: str) -> None:
    path = build_storage_path("a.png", NOW, folder)
    assert path.startswith(expected_prefix)
    assert GENERATED_NAME.match(path[len(expected_prefix) :])


def test_name_without_extension_gets_none() -> None:
    path = build_storage_path("README", NOW)
    assert re.match(r"^\d+-[a-z0-9]{13}$", path)


@pytest.mark.parametrize(
    ("name", "expected"),
    [("a.tar.gz", "gz"), ("report.pdf", "pdf"), ("noext", ""), (".env", "env")],
)
def test_file_extension(name: str, expected: str) -> None:
    assert file_extension(name) == expected


def test_same_millisecond_uploads_get_distinct_paths() -> None:
    paths = {build_storage_path("same.pdf", NOW, "weekly-reports") for _ in range(50)}
    assert len(paths) == 50


def test_random_suffix_alphabet() -> None:
    suffix = random_suffix()
    assert len(suffix) == 13
    assert re.fullmatch(r"[a-z0-9]+", suffix)


def test_encoding_is_per_segment_and_reversible() -> None:
    path = "my reports+2024/week 1/1704067200000-abc123.pdf"
    encoded = encode_storage_path(path)
    assert encoded == "my%20reports%2B2024/week%201/1704067200000-abc123.pdf"
    assert "%2F" not in encoded
    assert [unquote(segment) for segment in encoded.split("/")] == path.split("/")


def test_millis_are_exact() -> None:
    now = dt.datetime(2024, 1, 1, 0, 0, 0, 1000, tzinfo=dt.timezone.utc)
    for step in range(3):
        expected = 1704067200001 + 7 * step
        assert build_storage_path("a.txt", now).startswith(f"{expected}-")
        now += dt.timedelta(milliseconds=7)
    assert build_storage_path(
        "a.txt", dt.datetime(2024, 1, 1, 0, 0, 0, 999999, tzinfo=dt.timezone.utc)
    ).startswith("1704067200999-")


@pytest.mark.parametrize(
    "folder",
    ["reports/../other", "..", "./reports", "reports/.", "reports//week-1", "a/../../x"],
)
def test_dot_and_empty_folder_segments_rejected(folder: str) -> None:
    with pytest.raises(InputError, match="Invalid folder"):
        build_storage_path("a.txt", NOW, folder)


def test_encoded_path_survives_http_client_unchanged() -> None:
    path = build_storage_path("a b.txt", NOW, "reports/week 1+2/v1.0")
    url = f"https://example.r2.cloudflarestorage.com/bego/{encode_storage_path(path)}"
    prepared = requests.Request("PUT", url).prepare()
    assert prepared.path_url == f"/bego/{encode_storage_path(path)}"
