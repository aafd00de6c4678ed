"""Exceptions raised by the document decoding and snapshot loading paths"""


class DecodeError(ValueError):
    """A packaged document is missing a mandatory part or contains unparsable XML."""


class SnapshotError(ValueError):
    """A JSON document snapshot failed validation."""
