from __future__ import annotations


class WellnessError(Exception):
    """Base class for errors raised while answering a wellness question."""

    status_code = 500


class ValidationError(WellnessError):
    """The request is malformed or the message is missing."""

    status_code = 400


class ConfigurationError(WellnessError):
    """A required setting (usually a provider API key) is absent."""

    status_code = 500


class UpstreamError(WellnessError):
    """A provider call failed. Recovered by the fallback chain, never surfaced."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
