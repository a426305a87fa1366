"""Init file for lifxctl"""
from .client import LightClient
from .exceptions import LifxCtlError, LightNotFoundError
from .utils import utils

__all__ = [
    "LightClient",
    "LifxCtlError",
    "LightNotFoundError",
    "utils",
]
