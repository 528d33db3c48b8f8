"""Core runtime modules bundled with the shooting range controller."""

from . import configio, logger, models, paths, storage

__all__ = [
    "configio",
    "logger",
    "models",
    "paths",
    "storage",
]
