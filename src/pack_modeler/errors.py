"""
Pack Modeler Errors
===================

Exception hierarchy for geometry generation and export.

- ConfigurationError and its subclasses: parameters that cannot produce
  valid geometry. They also derive from ValueError so callers validating
  user input can catch them the usual way.
- NoGeometryError: nothing has been built that could be exported. This is
  recoverable; the user retries once a pack is built.
"""


class PackModelerError(Exception):
    """Base class for all pack modeler errors."""


class ConfigurationError(PackModelerError, ValueError):
    """Invalid physical or configuration parameters."""


class InvalidParameterError(ConfigurationError):
    """A parameter from the input boundary has the wrong type or range."""


class CatalogError(ConfigurationError):
    """Unknown cell family or malformed catalog data."""


class HolderConfigError(ConfigurationError):
    """Holder dimensions cannot contain the cell cutout."""


class EnclosureConfigError(ConfigurationError):
    """Wall thickness or fit tolerance out of range."""


class NoGeometryError(PackModelerError):
    """Raised when an export is requested but no geometry is available."""

    def __init__(self, message: str = "No geometry available to export"):
        super().__init__(message)
