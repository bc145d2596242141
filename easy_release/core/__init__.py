"""Core domain types and logic."""

from .config import ConfigError, ReleaseConfig, load_config
from .errors import ErrorCode
from .project import Project, ProjectError, load_project
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # project
    "Project",
    "ProjectError",
    "load_project",
    # result
    "Err",
    "Ok",
    "Result",
]
