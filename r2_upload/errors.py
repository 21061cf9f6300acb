class R2UploadError(Exception):
    """Base class for every failure surfaced to callers of the uploader."""

    http_status = 500

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationError(R2UploadError):
    pass


class InputError(R2UploadError):
    http_status = 400


class NoFileProvidedError(InputError):
    def __init__(self, message: str = "No file provided") -> None:
        super().__init__(message)


class AuthenticationError(R2UploadError):
    http_status = 401


class UploadFailure(R2UploadError):
    """The object store rejected the PUT, or it could not be reached.

    `status` is the upstream HTTP status (None for transport errors) and
    `upstream_body` the raw response text the store returned.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        upstream_body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.upstream_body = upstream_body
