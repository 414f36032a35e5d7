"""
Error types raised across the part finder services and mapped to HTTP responses
"""


class PartFinderError(Exception):
    """Base error. `status_code` is the HTTP status the API layer responds with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(PartFinderError):
    status_code = 400


class ConfigurationError(PartFinderError):
    status_code = 500

    @classmethod
    def missing(cls, variable: str) -> "ConfigurationError":
        return cls(f"Server is not configured with {variable}")


class ProviderError(PartFinderError):
    """A search or parts-database provider failed. Never leaves the aggregator."""

    status_code = 502


class GenerationError(PartFinderError):
    status_code = 500


class RenderError(GenerationError):
    pass


class JobNotFoundError(PartFinderError):
    status_code = 404


class JobQueueFullError(PartFinderError):
    status_code = 503
