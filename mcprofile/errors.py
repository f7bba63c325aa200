from http import HTTPStatus

from mcprofile.config import MAX_BATCH_SIZE


class MCProfileError(Exception):
    """
    Base class of every error raised by mcprofile.
    """


class UnknownFormatError(MCProfileError):
    """
    Raised by the response parsers when decoded JSON does not have the expected structure.
    """

    def __init__(self, message: str = "unknown JSON data format"):
        super().__init__(message)


class FailedRequestError(MCProfileError):
    """
    A non-200 reply from the Mojang servers, incl. the service error code and message if one was sent.
    """

    def __init__(self, endpoint: str, status: int, error_code: str = "", error_message: str = ""):
        self.endpoint = endpoint
        self.status = status
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(f"{endpoint}: {self.reason}")

    @property
    def reason(self) -> str:
        if self.error_code and self.error_message:
            return f"{self.error_code}: {self.error_message}"
        if self.error_code or self.error_message:
            return self.error_code or self.error_message
        try:
            return f"{self.status} {HTTPStatus(self.status).phrase}"
        except ValueError:
            return str(self.status)


class UnexpectedFormatError(MCProfileError):
    """
    The response from endpoint could not be understood. cause is either an UnknownFormatError
    or the decoding error which made parsing fail.
    """

    def __init__(self, endpoint: str, cause: Exception):
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"Parse {endpoint}: {cause}")


class ProfileError(MCProfileError):
    pass


class NoSuchProfileError(ProfileError):
    def __init__(self, message: str = "no such profile"):
        super().__init__(message)


class TooManyRequestsError(ProfileError):
    """
    The client exceeded its request rate limit. At the time of writing, the load operations
    share a rate limit of 600 requests per 10 minutes. Back off before trying again.
    """

    def __init__(self, message: str = "request rate limit exceeded"):
        super().__init__(message)


class MaxSizeExceededError(ProfileError):
    def __init__(self, size: int):
        self.size = size
        super().__init__(f"aggregate request size of {size} exceeded maximum of {MAX_BATCH_SIZE}")


class IDNotSetError(ProfileError):
    def __init__(self, message: str = "profile ID was not set"):
        super().__init__(message)


class NoCapeError(ProfileError):
    def __init__(self, message: str = "profile has no cape"):
        super().__init__(message)
