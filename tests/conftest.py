import datetime as dt
from dataclasses import dataclass, field
from typing import Any

import pytest
import requests

from r2_upload.datamodel import R2Config
from r2_upload.uploader import R2Uploader

FIXED_NOW = dt.datetime(2024, 1, 1, 0, 0, 0, tzinfo=dt.timezone.utc)
TEST_SECRET = "testsecret"


@dataclass
class FakeResponse:
    status_code: int = 200
    reason: str = "OK"
    text: str = ""


@dataclass
class FakePut:
    """Stands in for requests.put and records every call."""

    response: FakeResponse = field(default_factory=FakeResponse)
    error: Exception | None = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    def __call__(self, url: str, data: bytes, headers: dict[str, str], **kwargs: Any):
        self.calls.append({"url": url, "data": data, "headers": headers, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def config() -> R2Config:
    return R2Config(
        endpoint="example.r2.cloudflarestorage.com",
        access_key="testaccesskey",
        secret_access_key=TEST_SECRET,
        bucket="bego",
        public_url="https://pub-example.r2.dev/",
    )


@pytest.fixture
def fake_put(monkeypatch: pytest.MonkeyPatch) -> FakePut:
    fake = FakePut()
    monkeypatch.setattr(requests, "put", fake)
    return fake


@pytest.fixture
def uploader(config: R2Config) -> R2Uploader:
    return R2Uploader(config, clock=lambda: FIXED_NOW)


R2_ENV_NAMES = (
    "R2_ENDPOINT",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "R2_BUCKET",
    "R2_PUBLIC_URL",
    "R2_REGION",
)


@pytest.fixture
def clean_r2_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so teardown also drops anything a dotenv file loads.
    for name in R2_ENV_NAMES:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
