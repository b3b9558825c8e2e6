"""Core domain types and logic."""

from .config import ConfigError, ProjectLayout, ReleaseSettings, RunConfig, load_settings
from .errors import ErrorCode
from .flavors import FLAVORS, FlavorSpec, resolve_flavors
from .result import Err, Ok, Result
from .version import Version, VersionError, parse_version

__all__ = [
    # config
    "ConfigError",
    "ProjectLayout",
    "ReleaseSettings",
    "RunConfig",
    "load_settings",
    # errors
    "ErrorCode",
    # flavors
    "FLAVORS",
    "FlavorSpec",
    "resolve_flavors",
    # result
    "Err",
    "Ok",
    "Result",
    # version
    "Version",
    "VersionError",
    "parse_version",
]
