"""Porter exception hierarchy.

Collaborators (manifest codec, archive I/O, remote fetch) raise these.
The export and import pipelines catch them at their boundary and turn
them into error strings on the returned result.
"""


class PorterError(Exception):
    """Base exception for all porter errors."""


class ManifestFormatError(PorterError):
    """porter.yaml could not be decoded into a manifest."""


class ArchiveError(PorterError):
    """Archive could not be written, read, or has an invalid layout."""


class FetchError(PorterError):
    """Remote repository fetch failed."""

    def __init__(self, message: str = "", *, kind: str = "failed") -> None:
        super().__init__(message)
        self.kind = kind


class ConfigError(PorterError):
    """Invalid or missing configuration."""
