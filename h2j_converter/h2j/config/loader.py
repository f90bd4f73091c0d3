"""
Configuration loader for H2J.

This module handles loading and parsing of h2j_config.json files,
providing structured configuration objects with validation.
"""

import json
import os
from typing import Optional

from .models import H2JConfig
from ..utils.exceptions import ConfigurationError


class ConfigLoader:
    """
    Configuration loader class for handling h2j_config.json files.

    This class is responsible for loading, parsing, and validating
    configuration files, converting them to structured H2JConfig objects.
    """

    @classmethod
    def load(cls, config_path: Optional[str] = None, verbose: bool = False) -> H2JConfig:
        """
        Load configuration from an h2j_config.json file.

        Args:
            config_path: Path to the configuration file; None returns the defaults
            verbose: Print loading progress

        Returns:
            H2JConfig object with validated configuration

        Raises:
            ConfigurationError: If config file doesn't exist, is invalid JSON,
                               or holds invalid settings
        """
        if config_path is None:
            return H2JConfig()

        if verbose:
            print(f"📋 Loading configuration from {config_path}...")

        if not os.path.exists(config_path):
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_dict = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}")

        try:
            config = H2JConfig.from_dict(config_dict)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Error parsing configuration: {e}")

        if verbose:
            print(f"   📊 Configuration loaded successfully:")
            print(f"      Version: {config.version}")
            print(f"      Profile: {config.profiles.profile}")
            print(f"      Field profile: {config.profiles.field_profile}")

        return config
