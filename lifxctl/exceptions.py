"""Exceptions raised by lifxctl."""


class LifxCtlError(Exception):
    """Base class for lifxctl errors."""


class LightNotFoundError(LifxCtlError):
    """No light answered for the requested id or label."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"no light with {kind} '{key}' found")
        self.kind = kind
        self.key = key
