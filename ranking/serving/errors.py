"""
Exception types raised by the ranking pipeline.

Missing optional data (no embedding, no cached features, unknown user) is
never an error. These exceptions cover data that is present but unusable.
They propagate to the caller of the recommendation service unchanged.
"""


class RecommendationError(Exception):
    """Base class for pipeline errors."""


class InferenceResponseError(RecommendationError):
    """The inference endpoint returned a body that doesn't match the request."""


class FeatureParseError(RecommendationError, ValueError):
    """A numeric feature needed by a remote model is missing or unparsable."""

    def __init__(self, entity: str, key: str, value=None):
        self.entity = entity
        self.key = key
        self.value = value
        if value is None:
            message = f"{entity}: missing feature '{key}'"
        else:
            message = f"{entity}: feature '{key}' is not numeric: {value!r}"
        super().__init__(message)


class EmbeddingDimensionError(RecommendationError, ValueError):
    """User and item embeddings have different lengths."""
