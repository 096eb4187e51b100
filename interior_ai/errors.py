"""Exception types raised across the app."""


class InteriorAIError(Exception):
    """Base class for all application errors."""


class ConfigurationError(InteriorAIError):
    """A required setting (usually the API key) is missing."""


class ImageIngestionError(InteriorAIError):
    """The chosen file or sample could not be turned into an image payload."""


class AnalysisError(InteriorAIError):
    """Style analysis failed. The message is safe to show to the user."""


class VisualizationError(InteriorAIError):
    """The redesign image could not be generated."""
