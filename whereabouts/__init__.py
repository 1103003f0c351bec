"""IP address management helpers: address arithmetic, configuration, logging, versions and naming."""

__version__ = "0.1.0"

__all__ = [
    "iphelpers",
    "logger",
    "naming",
    "types",
    "version",
]