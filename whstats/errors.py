class WhstatsError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UpstreamFetchError(WhstatsError):
    """Redmine or timelogger database call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ConfigError(WhstatsError):
    """Configuration is missing or incomplete."""


class NoDataError(WhstatsError):
    """Neither source returned anything for the requested window."""
