"""
Exception types raised by the provider system.

Extraction errors (the ``ExtractionError`` family) are the only ones the Kwik
resolver retries; everything else goes straight to the caller.
"""
from __future__ import annotations


class PaheError(Exception):
    """Base class for every failure raised by paheflow."""


class UpstreamUnavailable(PaheError):
    def __init__(self, url: str, status: int):
        super().__init__(f"Failed to fetch {url}, StatusCode: {status}")
        self.url = url
        self.status = status


# ──────────────────────────────
#  Retryable extraction failures
# ──────────────────────────────
class ExtractionError(PaheError):
    """A page did not carry the markers we scrape for."""


class MalformedPayload(ExtractionError):
    """The packed payload (or its parameters) could not be decoded."""


class MarkerNotFound(ExtractionError):
    """A link, token or parameter literal was missing from the page."""


# ──────────────────────────────
#  Terminal failures
# ──────────────────────────────
class NoCandidatesFound(PaheError):
    def __init__(self, url: str):
        super().__init__(f"No episodes found in {url}")
        self.url = url


class EmptyCandidateSet(PaheError):
    def __init__(self):
        super().__init__("Cannot select from an empty candidate list")


class RetryLimitExceeded(PaheError):
    def __init__(self, url: str, attempts: int):
        super().__init__(f"Kwik fetch failed for {url}: exceeded retry limit ({attempts})")
        self.url = url
        self.attempts = attempts


class RedirectNotFound(PaheError):
    def __init__(self, url: str, status: int):
        super().__init__(f"Redirect Location not found in response from {url} (status {status})")
        self.url = url
        self.status = status


class InvalidEpisodeRange(PaheError, ValueError):
    pass
