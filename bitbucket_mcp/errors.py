"""Error taxonomy shared by the adapter, services and tool surface."""


class BitbucketError(Exception):
    """Base class for errors reported back to the tool caller."""

    pass


class InvalidArgument(BitbucketError):
    """Caller supplied insufficient or out-of-range input.

    Always raised before any network call.
    """

    pass


class UpstreamError(BitbucketError):
    """Bitbucket returned a non-2xx status (or the request never completed).

    status_code is None when the transport failed before a response arrived.
    """

    def __init__(
        self,
        status_code: int | None,
        reason: str = "",
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        head = f"{status_code} {reason}".strip() if status_code is not None else reason
        message = f"Bitbucket API error: {head}"
        if body:
            message = f"{message} - {body}"
        super().__init__(message)


class MalformedResponseError(UpstreamError):
    """A 2xx response is missing fields every record must carry."""

    def __init__(self, what: str, detail: str) -> None:
        super().__init__(None, f"malformed {what} response: {detail}")


class ConfigError(Exception):
    """Configuration is incomplete or invalid; fatal at startup."""

    pass
