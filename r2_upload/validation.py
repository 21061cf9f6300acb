from .constants import ALLOWED_FILE_TYPES, MAX_FILE_SIZE
from .errors import InputError


def validate_upload(size: int, content_type: str | None, folder: str | None) -> None:
    if size > MAX_FILE_SIZE:
        raise InputError(
            f"File size exceeds maximum allowed size of {MAX_FILE_SIZE // 1024 // 1024}MB"
        )
    allowed_types = ALLOWED_FILE_TYPES.get(folder or "")
    if allowed_types and content_type not in allowed_types:
        raise InputError(
            f"File type not allowed. Allowed types: {', '.join(allowed_types)}"
        )
