import datetime as dt

from .constants import AWS_TIMESTAMP_FORMAT
from .datamodel import R2Config, SignedPutRequest, SigningRequest, as_utc
from .paths import encode_storage_path
from .signing import authorization_header, sha256_hex, signature, signed_header_names


def build_put_request(
    config: R2Config,
    path: str,
    payload: bytes,
    content_type: str,
    now: dt.datetime,
) -> SignedPutRequest:
    now = as_utc(now)
    uri = f"/{config.bucket}/{encode_storage_path(path)}"
    signing_request = SigningRequest(
        method="PUT",
        uri=uri,
        query_string="",
        headers={
            "host": config.endpoint,
            "x-amz-date": now.strftime(AWS_TIMESTAMP_FORMAT),
            "x-amz-content-sha256": sha256_hex(payload),
            "content-type": content_type,
            "content-length": str(len(payload)),
        },
        payload=payload,
        request_timestamp=now,
        region=config.region,
        service=config.service,
    )
    signature_hex = signature(signing_request, config.secret_access_key)
    signed_headers = signed_header_names(signing_request.headers)
    return SignedPutRequest(
        url=f"{config.endpoint_url}{uri}",
        headers={
            **signing_request.headers,
            "Authorization": authorization_header(
                config.access_key,
                signing_request.credential_scope,
                signed_headers,
                signature_hex,
            ),
        },
        signed_headers=signed_headers,
    )
