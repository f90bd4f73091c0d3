"""
Data models for H2J configuration management.

The configuration is built once (from defaults or from an h2j_config.json
file) and handed explicitly to both engines. Every model is frozen: a
transform can never change the settings another transform is using.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..utils.constants import (
    COMPONENT_SEPARATOR, DEFAULT_FIELD_PROFILE, DEFAULT_PROFILE, ESCAPE_CHARACTER,
    FIELD_SEPARATOR, HEADER_SEGMENT, REPETITION_SEPARATOR, RUNTIME_TYPED_FIELDS,
    SUBCOMPONENT_SEPARATOR
)
from ..utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class EncodingConfig:
    """HL7 delimiter characters."""
    field_separator: str = FIELD_SEPARATOR
    component_separator: str = COMPONENT_SEPARATOR
    repetition_separator: str = REPETITION_SEPARATOR
    escape_character: str = ESCAPE_CHARACTER
    subcomponent_separator: str = SUBCOMPONENT_SEPARATOR
    header_segment: str = HEADER_SEGMENT

    @property
    def encoding_characters(self) -> str:
        """The MSH-2 value: component, repetition, escape, subcomponent."""
        return (self.component_separator + self.repetition_separator
                + self.escape_character + self.subcomponent_separator)

    def validate(self) -> None:
        """
        Validate the delimiters.

        Raises:
            ConfigurationError: If a delimiter is not a single character or
                               two delimiters share a character
        """
        delimiters = {
            'field_separator': self.field_separator,
            'component_separator': self.component_separator,
            'repetition_separator': self.repetition_separator,
            'escape_character': self.escape_character,
            'subcomponent_separator': self.subcomponent_separator,
        }
        for name, value in delimiters.items():
            if not isinstance(value, str) or len(value) != 1:
                raise ConfigurationError(f"Delimiter '{name}' must be a single character, got {value!r}")
        if len(set(delimiters.values())) != len(delimiters):
            raise ConfigurationError(f"Delimiters must be distinct: {delimiters}")


@dataclass(frozen=True)
class ProfilesConfig:
    """Names of the profile and template resources to load."""
    profile: str = DEFAULT_PROFILE
    field_profile: str = DEFAULT_FIELD_PROFILE
    template: Optional[str] = None
    resources_directory: Optional[str] = None


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for output settings."""
    concat_delimiter: Optional[str] = None  # None: repeating values become arrays
    indent: Optional[int] = 2


@dataclass(frozen=True)
class TraceLogConfig:
    """Configuration for trace logging settings."""
    enabled: bool = False
    verbosity: str = "normal"  # minimal, normal, detailed, debug
    output_directory: str = "trace_logs"

    def validate(self) -> None:
        """
        Validate trace log configuration.

        Raises:
            ConfigurationError: If verbosity level is invalid
        """
        valid_levels = ["minimal", "normal", "detailed", "debug"]
        if self.verbosity.lower() not in valid_levels:
            raise ConfigurationError(f"Invalid verbosity level: {self.verbosity}. Must be one of {valid_levels}")


def _default_runtime_typed_fields() -> Dict[str, Dict[int, int]]:
    return {segment: dict(fields) for segment, fields in RUNTIME_TYPED_FIELDS.items()}


@dataclass(frozen=True)
class H2JConfig:
    """Main configuration class containing all config sections."""
    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    profiles: ProfilesConfig = field(default_factory=ProfilesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    trace_log: TraceLogConfig = field(default_factory=TraceLogConfig)
    runtime_typed_fields: Mapping[str, Mapping[int, int]] = field(default_factory=_default_runtime_typed_fields)
    version: str = "v1"

    def discriminator_for(self, segment_code: str, field_number: int) -> Optional[int]:
        """Field number carrying the data type of a runtime-typed field, if any."""
        return self.runtime_typed_fields.get(segment_code, {}).get(field_number)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'H2JConfig':
        """
        Create H2JConfig from dictionary (parsed from JSON).

        Missing sections fall back to their defaults.

        Args:
            config_dict: Dictionary containing configuration data

        Returns:
            H2JConfig instance

        Raises:
            ConfigurationError: If a section holds invalid values
        """
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration root must be a JSON object")

        encoding_section = config_dict.get('encoding', {})
        encoding = EncodingConfig(
            field_separator=encoding_section.get('field_separator', FIELD_SEPARATOR),
            component_separator=encoding_section.get('component_separator', COMPONENT_SEPARATOR),
            repetition_separator=encoding_section.get('repetition_separator', REPETITION_SEPARATOR),
            escape_character=encoding_section.get('escape_character', ESCAPE_CHARACTER),
            subcomponent_separator=encoding_section.get('subcomponent_separator', SUBCOMPONENT_SEPARATOR),
        )
        encoding.validate()

        profiles_section = config_dict.get('profiles', {})
        profiles = ProfilesConfig(
            profile=profiles_section.get('profile', DEFAULT_PROFILE),
            field_profile=profiles_section.get('field_profile', DEFAULT_FIELD_PROFILE),
            template=profiles_section.get('template'),
            resources_directory=profiles_section.get('resources_directory')
        )

        output_section = config_dict.get('output', {})
        output = OutputConfig(
            concat_delimiter=output_section.get('concat_delimiter'),
            indent=output_section.get('indent', 2)
        )

        trace_log_section = config_dict.get('trace_log', {})
        trace_log = TraceLogConfig(
            enabled=trace_log_section.get('enabled', False),
            verbosity=trace_log_section.get('verbosity', 'normal'),
            output_directory=trace_log_section.get('output_directory', 'trace_logs')
        )
        trace_log.validate()

        runtime_typed_fields = _default_runtime_typed_fields()
        if 'runtime_typed_fields' in config_dict:
            runtime_typed_fields = cls._parse_runtime_typed_fields(config_dict['runtime_typed_fields'])

        return cls(
            encoding=encoding,
            profiles=profiles,
            output=output,
            trace_log=trace_log,
            runtime_typed_fields=runtime_typed_fields,
            version=config_dict.get('version', 'v1')
        )

    @staticmethod
    def _parse_runtime_typed_fields(section: Any) -> Dict[str, Dict[int, int]]:
        # JSON object keys are strings: {"OBX": {"5": 2}}
        if not isinstance(section, dict):
            raise ConfigurationError("'runtime_typed_fields' must map segment codes to {field: discriminator}")
        parsed: Dict[str, Dict[int, int]] = {}
        for segment, fields in section.items():
            if not isinstance(fields, dict):
                raise ConfigurationError(f"'runtime_typed_fields.{segment}' must be an object")
            try:
                parsed[segment] = {int(number): int(discriminator) for number, discriminator in fields.items()}
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid field number in 'runtime_typed_fields.{segment}': {e}")
        return parsed
