"""Base class for domain services."""


class Service:
    """Marker base for services that coordinate stores and external clients."""
