import datetime as dt
import logging
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

import requests

from .constants import DEFAULT_CONTENT_TYPE
from .datamodel import R2Config, SignedPutRequest, UploadResult
from .errors import NoFileProvidedError, UploadFailure
from .paths import build_storage_path
from .request_helpers import build_put_request

ParamT = ParamSpec("ParamT")
ReturnT = TypeVar("ReturnT")

logger = logging.getLogger(__name__)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _raise_upload_failure_on_transport_error(
    wrapped: Callable[ParamT, ReturnT],
) -> Callable[ParamT, ReturnT]:
    @wraps(wrapped)
    def _(*args: ParamT.args, **kwargs: ParamT.kwargs) -> ReturnT:
        try:
            return wrapped(*args, **kwargs)
        except requests.RequestException as e:
            logger.error("Transport error talking to object store: %s", e)
            raise UploadFailure(f"Failed to upload file: {e}") from e

    return _


def _redacted(headers: dict[str, str]) -> dict[str, str]:
    return {
        name: "<redacted>" if name.lower() == "authorization" else value
        for name, value in headers.items()
    }


@_raise_upload_failure_on_transport_error
def _put_object(signed_request: SignedPutRequest, payload: bytes) -> None:
    headers_to_send = dict(signed_request.headers)
    logger.debug(
        "PUT %s signed over %s", signed_request.url, signed_request.signed_headers
    )
    response = requests.put(
        signed_request.url,
        data=payload,
        headers=headers_to_send,
    )
    if 200 <= response.status_code < 300:
        return

    error_text = response.text
    logger.error(
        "R2 upload error: %s %s\nError details: %s\nRequest URL: %s\nRequest headers: %s",
        response.status_code,
        response.reason,
        error_text,
        signed_request.url,
        _redacted(headers_to_send),
    )
    raise UploadFailure(
        f"Failed to upload to R2: {response.status_code} {response.reason} - {error_text}",
        status=response.status_code,
        upstream_body=error_text,
    )


class R2Uploader:
    """Stores one file per call in the configured bucket and returns its public URL.

    Every call captures its own timestamp from `clock`, so a caller that
    retries after a failure always sends a freshly signed request.
    """

    def __init__(
        self,
        config: R2Config,
        clock: Callable[[], dt.datetime] = utc_now,
    ) -> None:
        self.config = config
        self.clock = clock

    def public_url(self, path: str) -> str:
        return f"{self.config.public_url}/{path}"

    def upload(
        self,
        file_bytes: bytes | None,
        file_name: str,
        content_type: str | None = None,
        folder: str | None = None,
    ) -> UploadResult:
        if file_bytes is None:
            raise NoFileProvidedError()
        content_type = content_type or DEFAULT_CONTENT_TYPE

        now = self.clock()
        path = build_storage_path(file_name, now, folder)
        signed_request = build_put_request(
            self.config, path, file_bytes, content_type, now
        )
        _put_object(signed_request, file_bytes)

        logger.info("Uploaded %s (%d bytes) to %s", file_name, len(file_bytes), path)
        return UploadResult(
            url=self.public_url(path),
            path=path,
            file_name=file_name,
            size=len(file_bytes),
        )
