"""Error hierarchy for crawl failure classification.

Transient failures (non-2xx responses, network errors, timeouts) cost one page
and the crawl moves on. Permanent failures are not worth retrying; only a
missing user id stops a crawl before it starts.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def submit(record):
        ...
"""


class ScrapingError(Exception):
    """Base exception for all portal scraping errors."""

    pass


class TransientError(ScrapingError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, 503 Service Unavailable, dropped connections.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded (HTTP 429) - needs longer backoff."""

    pass


class PermanentError(ScrapingError):
    """Failure that won't succeed on retry."""

    pass


class AuthenticationError(PermanentError):
    """The portal answered with its login form - the session has expired.

    Requires a fresh browser session, cannot be fixed by retry.
    """

    pass


class MissingUserIdError(PermanentError):
    """No portal user id could be resolved, so no page URL can be built."""

    pass


class SyncError(ScrapingError):
    """The sync endpoint rejected or failed to accept an aggregate record."""

    pass
