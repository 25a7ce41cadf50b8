"""Error taxonomy for the scrape pipeline.

An empty result page is not an error: the navigator reports it as ``None``
and the pipeline returns an empty list.
"""


class ScraperError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LaunchFailure(ScraperError):
    """The browser process could not be started."""


class NavigationError(ScraperError):
    """The target page failed to load within the timeout."""


class BlockedError(ScraperError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Blocked by anti-bot challenge at {url}")


class ExtractionError(ScraperError):
    """One listing card could not be parsed. Never escapes the extractor."""

    def __init__(self, index: int, cause: Exception):
        self.index = index
        self.cause = cause
        super().__init__(f"Card {index} failed to parse: {cause}")
