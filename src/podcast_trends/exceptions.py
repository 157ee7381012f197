"""Centralized exception hierarchy for the podcast-trends package.

All domain-specific exceptions inherit from ``PodcastTrendsError`` so
callers can catch the entire family with a single ``except`` clause.

Catalog-side errors are absorbed by the trend aggregator and replaced with
fallback content. Synthesis-side errors surface to the HTTP layer.
"""

from __future__ import annotations


class PodcastTrendsError(Exception):
    """Base exception for all podcast-trends errors."""


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class ConfigurationError(PodcastTrendsError):
    """Raised when required credentials or settings are missing."""


# ---------------------------------------------------------------------------
# Catalog errors
# ---------------------------------------------------------------------------


class CatalogError(PodcastTrendsError):
    """Base exception for podcast catalog failures."""


class UpstreamAuthError(CatalogError):
    """Raised when the catalog credential exchange fails."""


class UpstreamQueryError(CatalogError):
    """Raised when a catalog query fails or returns an error payload."""


class NoMatchError(CatalogError):
    """Raised when the query filters excluded every candidate podcast."""


# ---------------------------------------------------------------------------
# Lookup errors
# ---------------------------------------------------------------------------


class NotFoundError(PodcastTrendsError):
    """Raised when a requested episode is absent from the current snapshot."""


# ---------------------------------------------------------------------------
# Synthesis errors
# ---------------------------------------------------------------------------


class SynthesisError(PodcastTrendsError):
    """Base exception for speech synthesis failures."""


class EmptyAudioError(SynthesisError):
    """Raised when the speech provider completed without any audio."""


class SpeechSessionError(SynthesisError):
    """Raised when the speech session fails to connect, send, or complete."""


class SpeechTimeoutError(SynthesisError):
    """Raised when the speech session does not complete in time."""


class AudioWriteError(SynthesisError):
    """Raised when synthesized audio cannot be written to the audio directory."""
