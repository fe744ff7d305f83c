"""Exception hierarchy shared across CineConcerts modules."""


class CineConcertsError(Exception):
    """Base for all CineConcerts errors."""


class CapacityError(CineConcertsError):
    """Raised when a session cannot be created because the registry is full."""

    def __init__(self, max_sessions: int):
        super().__init__(f"Session capacity reached ({max_sessions} live sessions)")
        self.max_sessions = max_sessions


class ProviderError(CineConcertsError):
    """An external provider could not answer."""


class SearchUnavailableError(ProviderError):
    """The search index could not be queried."""


class GeocodeUnavailableError(ProviderError):
    """The geocoding service could not be queried."""
