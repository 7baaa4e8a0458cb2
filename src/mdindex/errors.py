"""Exception hierarchy for mdindex."""


class MdIndexError(Exception):
    """Base class for errors raised by mdindex."""


class CacheCorruptError(MdIndexError):
    """A persisted snapshot or modification-time table cannot be used."""


class DocumentLoadError(MdIndexError):
    """A document could not be read from disk."""
