class SearchError(Exception):
    """Base area search exception."""


class MissingGeometry(SearchError):
    """Raised when no geometry was supplied; callers answer with an empty result."""


class SearchInputError(SearchError):
    """Raised when the caller sent a request that cannot be served as-is."""


class MalformedGeometry(SearchInputError):
    """Raised when the geometry has no usable ring coordinates."""


class UnknownPresetError(SearchInputError):
    """Raised when a requested preset filter id does not exist."""


class BackendQueryFailed(SearchError):
    """Raised when the spatial store could not answer a query."""


class DatasetLoadFailed(SearchError):
    """Raised when the sample dataset cannot be read at all."""
