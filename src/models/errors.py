# src/models/errors.py

"""Exception hierarchy shared across sources, storage and services."""


class PricefindError(Exception):
    """Base class for all pricefind errors."""


class SourceError(PricefindError):
    """A product source could not be reached or returned bad data."""


class InvalidFilterError(PricefindError):
    """A filter configuration cannot be satisfied (e.g. min > max)."""


class StorageError(PricefindError):
    """Durable client storage could not be written."""


class FavoritesSyncError(PricefindError):
    """The remote favorites store rejected or failed a request."""
