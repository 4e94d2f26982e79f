"""Exception types raised by Ideate's external-call layers."""


class IdeateError(Exception):
    """Base class for all Ideate errors."""


class SearchError(IdeateError):
    """The web search provider failed (non-200 status or transport error)."""


class SearchConfigurationError(SearchError):
    """The web search provider credential is missing."""


class GenerationError(IdeateError):
    """The text-generation service failed or returned no text."""
