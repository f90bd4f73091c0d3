"""
Utility modules for H2J.

This module contains constants, exceptions, name normalization, JSON tree
helpers and the trace logger used throughout the application.
"""

from .constants import *
from .exceptions import *
from .json_tree import build_skeleton, graft_merge, replace_key
from .strings import normalize
from .trace_logger import TraceLogger, VerbosityLevel

__all__ = [
    # Constants
    "SEGMENT_TERMINATOR",
    "FIELD_SEPARATOR",
    "COMPONENT_SEPARATOR",
    "REPETITION_SEPARATOR",
    "ESCAPE_CHARACTER",
    "SUBCOMPONENT_SEPARATOR",
    "HEADER_SEGMENT",
    "CHILDREN_KEY",
    "PRIMITIVE_TYPE",
    "RUNTIME_TYPED_FIELDS",
    "DEFAULT_PROFILE",
    "DEFAULT_FIELD_PROFILE",
    "DEFAULT_TEMPLATE",
    # Exceptions
    "H2JError",
    "ConfigurationError",
    "HL7ParsingError",
    "TemplateError",
    "UnsupportedTemplateError",
    # Helpers
    "build_skeleton",
    "graft_merge",
    "replace_key",
    "normalize",
    "TraceLogger",
    "VerbosityLevel",
]
