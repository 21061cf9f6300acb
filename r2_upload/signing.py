"""AWS Signature Version 4 for single-shot object PUTs.

Everything here is a pure function of its arguments: no clock reads, no
network, no module state. The timestamp a signature is bound to is always
passed in by the caller so the credential scope date and the `x-amz-date`
header can never disagree.
"""

import datetime as dt
import hashlib
import hmac
import logging
from typing import Mapping

from .constants import (
    ALGORITHM,
    KEY_PREFIX,
    S3_SERVICE,
    SCOPE_TERMINATOR,
)
from .datamodel import SigningRequest

logger = logging.getLogger(__name__)

_AWS_UNRESERVED = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~"
)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def uri_encode(value: str, encode_slash: bool = True) -> str:
    """Percent-encode `value` the way SigV4 expects.

    Only A-Z, a-z, 0-9, '-', '_', '.' and '~' pass through; every other
    UTF-8 octet becomes %XX with uppercase hex. '/' is kept as-is when
    `encode_slash` is False.
    """
    encoded: list[str] = []
    for char in value:
        if char in _AWS_UNRESERVED or (char == "/" and not encode_slash):
            encoded.append(char)
        else:
            encoded.extend(f"%{octet:02X}" for octet in char.encode("utf-8"))
    return "".join(encoded)


def _lowercase_headers(headers: Mapping[str, str]) -> dict[str, str]:
    lowered: dict[str, str] = {}
    for name, value in headers.items():
        lname = name.lower()
        if lname in lowered:
            raise ValueError(f"Header {name!r} supplied more than once")
        lowered[lname] = value
    return lowered


def signed_header_names(headers: Mapping[str, str]) -> str:
    return ";".join(sorted(_lowercase_headers(headers)))


def canonical_headers(headers: Mapping[str, str]) -> str:
    lowered = _lowercase_headers(headers)
    return "".join(f"{name}:{lowered[name].strip()}\n" for name in sorted(lowered))


def canonical_request(request: SigningRequest) -> str:
    return "\n".join(
        [
            request.method,
            request.uri,
            request.query_string,
            canonical_headers(request.headers),
            signed_header_names(request.headers),
            sha256_hex(request.payload),
        ]
    )


def string_to_sign(request: SigningRequest, canonical: str) -> str:
    return "\n".join(
        [
            ALGORITHM,
            request.amz_date,
            request.credential_scope,
            sha256_hex(canonical.encode("utf-8")),
        ]
    )


def derive_signing_key(
    secret_key: str, date_stamp: str, region: str, service: str = S3_SERVICE
) -> bytes:
    k_date = hmac_sha256(f"{KEY_PREFIX}{secret_key}".encode("utf-8"), date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, service)
    return hmac_sha256(k_service, SCOPE_TERMINATOR)


def _check_bound_headers(request: SigningRequest) -> None:
    lowered = _lowercase_headers(request.headers)
    declared_date = lowered.get("x-amz-date")
    if declared_date is not None and declared_date.strip() != request.amz_date:
        raise ValueError(
            f"x-amz-date {declared_date!r} does not match signing time {request.amz_date!r}"
        )
    declared_hash = lowered.get("x-amz-content-sha256")
    if declared_hash is not None and declared_hash.strip() != sha256_hex(
        request.payload
    ):
        raise ValueError("x-amz-content-sha256 does not match the payload")


def signature(request: SigningRequest, secret_key: str) -> str:
    _check_bound_headers(request)
    canonical = canonical_request(request)
    logger.debug("CanonicalRequest:\n%s", canonical)
    to_sign = string_to_sign(request, canonical)
    logger.debug("StringToSign:\n%s", to_sign)
    signing_key = derive_signing_key(
        secret_key, request.date_stamp, request.region, request.service
    )
    return hmac.new(signing_key, to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


def sign(
    method: str,
    uri: str,
    query_string: str,
    headers: Mapping[str, str],
    payload: bytes,
    now: dt.datetime,
    *,
    secret_key: str,
    region: str,
    service: str = S3_SERVICE,
) -> str:
    return signature(
        SigningRequest(
            method=method,
            uri=uri,
            query_string=query_string,
            headers=headers,
            payload=payload,
            request_timestamp=now,
            region=region,
            service=service,
        ),
        secret_key,
    )


def authorization_header(
    access_key: str, credential_scope: str, signed_headers: str, signature_hex: str
) -> str:
    return (
        f"{ALGORITHM} Credential={access_key}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature_hex}"
    )
