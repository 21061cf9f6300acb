ALGORITHM = "AWS4-HMAC-SHA256"
KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
S3_SERVICE = "s3"
DEFAULT_REGION = "auto"

AWS_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"
AWS_DATESTAMP_FORMAT = "%Y%m%d"

DEFAULT_CONTENT_TYPE = "application/octet-stream"
RANDOM_SUFFIX_LENGTH = 13

MAX_FILE_SIZE = 10 * 1024 * 1024
_DOCUMENT_TYPES = ("application/pdf", "image/jpeg", "image/png", "image/jpg")
ALLOWED_FILE_TYPES = {
    "weekly-reports": _DOCUMENT_TYPES,
    "academic-reports": _DOCUMENT_TYPES,
    "tuition-receipts": _DOCUMENT_TYPES,
}
