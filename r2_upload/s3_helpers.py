import logging
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import ClientError

from .datamodel import R2Config

logger = logging.getLogger(__name__)


@dataclass
class StoredObject:
    size: int
    content_type: str | None = None
    metadata: dict[str, Any] | None = None


def _try_extract_nested_error(parent_key: str, child_key: str, resp: dict) -> int | None:
    if (extracted := resp.get(parent_key)) and isinstance(extracted, dict):
        if (child_value := extracted.get(child_key)) and isinstance(
            child_value,
            (str, int),
        ):
            try:
                return int(child_value)
            except ValueError:
                pass
    return None


def _is_not_found(error: ClientError) -> bool:
    resp = error.response
    if not isinstance(resp, dict):
        return False
    return 404 in (
        _try_extract_nested_error("Error", "Code", resp),
        _try_extract_nested_error("ResponseMetadata", "HTTPStatusCode", resp),
    )


def head_stored_object(config: R2Config, path: str) -> StoredObject | None:
    try:
        object_metadata = config.s3_client.head_object(Bucket=config.bucket, Key=path)
    except ClientError as e:
        if _is_not_found(e):
            return None
        raise
    object_metadata.pop("ResponseMetadata", None)
    return StoredObject(
        size=int(object_metadata.get("ContentLength", 0)),
        content_type=object_metadata.get("ContentType"),
        metadata=object_metadata,
    )


def verify_upload(config: R2Config, path: str, expected_size: int) -> bool:
    stored = head_stored_object(config, path)
    if stored is None:
        logger.warning("Uploaded object %s not found in bucket %s", path, config.bucket)
        return False
    if stored.size != expected_size:
        logger.warning(
            "Uploaded object %s has %d bytes, expected %d",
            path,
            stored.size,
            expected_size,
        )
        return False
    return True
