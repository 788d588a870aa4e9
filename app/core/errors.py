class PintervalError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingCredentialError(PintervalError):
    status_code = 500
    code = "MISSING_CREDENTIAL"


class BadRequestError(PintervalError):
    status_code = 400
    code = "BAD_REQUEST"


class ForbiddenError(PintervalError):
    status_code = 403
    code = "FORBIDDEN"


class PayloadTooLargeError(PintervalError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"


class MockDataError(PintervalError):
    status_code = 500
    code = "MOCK_DATA_ERROR"


class UpstreamError(PintervalError):
    """A call to Pinterest (or a proxied image host) did not succeed.

    ``upstream_status`` is ``None`` when no HTTP response was received at all.
    """

    status_code = 502
    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, upstream_status: int | None = None, body: str = ""):
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(message)


class UpstreamTimeoutError(UpstreamError):
    code = "UPSTREAM_TIMEOUT"


class UpstreamParseError(UpstreamError):
    code = "UPSTREAM_PARSE_ERROR"
