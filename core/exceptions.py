"""
Exception hierarchy for the trip planner search engine.

Provider clients raise these. The search services treat every provider
failure as "no results", while the HTTP layer maps them to status codes
through ``core.api``.
"""


class TripPlannerError(Exception):
    """Root of all planner errors; carries a message and structured details."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TripPlannerError):
    """Caller supplied coordinates, queries or settings that cannot be used."""


class ExternalServiceError(TripPlannerError):
    """A geocoding, transit, Overpass or routing provider call failed."""

    @property
    def status(self) -> int | None:
        return self.details.get("status")


class RateLimitError(ExternalServiceError):
    """A provider answered 429."""

    @property
    def retry_after(self) -> int:
        return int(self.details.get("retry_after", 5))


class ResourceNotFoundError(TripPlannerError):
    """No place, station or route exists for the request."""


TripPlannerException = TripPlannerError
ValidationException = ValidationError
ExternalServiceException = ExternalServiceError
RateLimitException = RateLimitError
ResourceNotFoundException = ResourceNotFoundError
