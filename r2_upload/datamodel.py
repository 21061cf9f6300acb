import datetime as dt
import os
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Mapping

import boto3

from .constants import (
    AWS_DATESTAMP_FORMAT,
    AWS_TIMESTAMP_FORMAT,
    DEFAULT_REGION,
    S3_SERVICE,
    SCOPE_TERMINATOR,
)
from .errors import ConfigurationError

_REQUIRED_ENV = {
    "endpoint": "R2_ENDPOINT",
    "access_key": "R2_ACCESS_KEY_ID",
    "secret_access_key": "R2_SECRET_ACCESS_KEY",
    "bucket": "R2_BUCKET",
    "public_url": "R2_PUBLIC_URL",
}


def as_utc(timestamp: dt.datetime) -> dt.datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=dt.timezone.utc)
    return timestamp.astimezone(dt.timezone.utc)


@dataclass
class R2Config:
    endpoint: str
    access_key: str
    secret_access_key: str = field(repr=False)
    bucket: str
    public_url: str
    region: str = DEFAULT_REGION
    service: str = S3_SERVICE

    def __post_init__(self) -> None:
        missing = [
            env_name
            for attr, env_name in _REQUIRED_ENV.items()
            if not getattr(self, attr)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing storage configuration: {', '.join(missing)}"
            )
        if "://" in self.endpoint or "/" in self.endpoint:
            raise ConfigurationError(
                f"R2_ENDPOINT must be a bare hostname, got {self.endpoint!r}"
            )
        self.public_url = self.public_url.rstrip("/")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "R2Config":
        if environ is None:
            environ = os.environ
        values = {
            attr: environ.get(env_name, "").strip()
            for attr, env_name in _REQUIRED_ENV.items()
        }
        region = environ.get("R2_REGION", "").strip() or DEFAULT_REGION
        return cls(**values, region=region)

    @property
    def endpoint_url(self) -> str:
        return f"https://{self.endpoint}"

    @cached_property
    def s3_client(self) -> boto3.client:
        return boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_access_key,
            region_name=self.region,
        )


@dataclass(frozen=True)
class SigningRequest:
    method: str
    uri: str
    query_string: str
    headers: Mapping[str, str]
    payload: bytes
    request_timestamp: dt.datetime
    region: str = DEFAULT_REGION
    service: str = S3_SERVICE

    def __post_init__(self) -> None:
        object.__setattr__(self, "request_timestamp", as_utc(self.request_timestamp))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def date_stamp(self) -> str:
        return self.request_timestamp.strftime(AWS_DATESTAMP_FORMAT)

    @property
    def amz_date(self) -> str:
        return self.request_timestamp.strftime(AWS_TIMESTAMP_FORMAT)

    @property
    def credential_scope(self) -> str:
        return f"{self.date_stamp}/{self.region}/{self.service}/{SCOPE_TERMINATOR}"


@dataclass(frozen=True)
class SignedPutRequest:
    url: str
    headers: Mapping[str, str]
    signed_headers: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass
class UploadResult:
    url: str
    path: str
    file_name: str
    size: int
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "url": self.url,
            "path": self.path,
            "fileName": self.file_name,
            "size": self.size,
        }
