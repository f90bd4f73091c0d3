"""
Configuration management module for H2J.

This module handles loading and validation of configuration files,
providing structured data models for configuration management.
"""

from .loader import ConfigLoader
from .models import H2JConfig, EncodingConfig, ProfilesConfig, OutputConfig, TraceLogConfig

__all__ = [
    "ConfigLoader",
    "H2JConfig",
    "EncodingConfig",
    "ProfilesConfig",
    "OutputConfig",
    "TraceLogConfig",
]
