"""
Direct HL7 v2.x to JSON transformer for H2J.

Builds a JSON tree that mirrors the message: segments keyed by code, fields
keyed by their normalized profile names, composite fields broken into
components and subcomponents, and grouped segments nested under a
``children`` array.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

from ..config.models import H2JConfig
from ..parsers.hl7_parser import HL7Hierarchy, HL7Parser
from ..profiles.models import FieldDescriptor, Profile
from ..profiles.resource_manager import ResourceManager
from ..utils.constants import (
    CHILDREN_KEY, DEFAULT_FIELD_PROFILE, HEADER_ENCODING_CHARACTERS_KEY, HEADER_FIELD_SEPARATOR_KEY
)
from ..utils.trace_logger import TraceLogger, VerbosityLevel


def _value_at(values: Optional[Sequence[str]], position: int) -> Optional[str]:
    if values is None or position < 0 or position >= len(values):
        return None
    return values[position]


class HL7JsonTransformer:
    """
    Transforms one parsed message into a JSON tree using segment and field
    names as keys.

    The transform is a pure function of the hierarchy, the two profiles and
    the configuration; calling ``transform`` twice yields equal trees.
    """

    def __init__(self, hierarchy: HL7Hierarchy, profile: Profile, field_profile: Profile,
                 config: Optional[H2JConfig] = None):
        """
        Args:
            hierarchy: Root of the parsed message hierarchy
            profile: Segment profile (segment code -> fields)
            field_profile: Data type profile (composite type -> components)
            config: Delimiters and runtime-typed field table
        """
        self.hierarchy = hierarchy
        self.profile = profile
        self.field_profile = field_profile
        self.config = config or H2JConfig()

    @classmethod
    def from_resources(cls, message: str, profile_name: str,
                       field_profile_name: str = DEFAULT_FIELD_PROFILE,
                       resource_manager: Optional[ResourceManager] = None,
                       config: Optional[H2JConfig] = None) -> 'HL7JsonTransformer':
        """
        Factory that loads both profiles by name and parses the message.

        Raises:
            ConfigurationError: If a profile is missing or malformed
            HL7ParsingError: If the message is not HL7
        """
        config = config or H2JConfig()
        manager = resource_manager or ResourceManager(config.profiles.resources_directory)
        profile = manager.load_profile(profile_name)
        field_profile = manager.load_profile(field_profile_name)
        parser = HL7Parser(message, profile, config.encoding)
        return cls(parser.msg_hierarchy(), profile, field_profile, config)

    def transform(self, trace_logger: Optional[TraceLogger] = None) -> Dict[str, Any]:
        """
        Transform the message into a JSON tree.

        Args:
            trace_logger: Optional per-call trace logger

        Returns:
            Dictionary keyed by top-level segment code
        """
        full_hl7: Dict[str, Any] = {}
        for segment in self.hierarchy.children:
            self._process_segment(segment, full_hl7, trace_logger)

        encoding = self.config.encoding
        header = full_hl7.get(encoding.header_segment)
        if isinstance(header, dict):
            # MSH-1/MSH-2 are the delimiters and cannot be recovered by splitting
            header[HEADER_FIELD_SEPARATOR_KEY] = encoding.field_separator
            header[HEADER_ENCODING_CHARACTERS_KEY] = encoding.encoding_characters
        return full_hl7

    def _process_segment(self, segment: HL7Hierarchy, parent: Union[Dict[str, Any], List[Any]],
                         trace_logger: Optional[TraceLogger]) -> None:
        code = segment.segment_code
        segment_json: Dict[str, Any] = {}
        if isinstance(parent, list):
            parent.append({code: segment_json})
        else:
            parent[code] = segment_json

        if trace_logger:
            trace_logger.log_source_data(f"{code} segment", segment.segment, VerbosityLevel.DEBUG)

        encoding = self.config.encoding
        tokens = segment.segment.split(encoding.field_separator)
        index_skew = 1 if code == encoding.header_segment else 0

        for descriptor in self.profile.lookup(code) or ():
            segment_json[descriptor.key] = self._render_field(code, descriptor, tokens, index_skew, trace_logger)

        if segment.children:
            children: List[Any] = []
            segment_json[CHILDREN_KEY] = children
            for child in segment.children:
                self._process_segment(child, children, trace_logger)

    def _resolve_data_type(self, code: str, descriptor: FieldDescriptor, tokens: List[str],
                           index_skew: int, trace_logger: Optional[TraceLogger]) -> str:
        discriminator = self.config.discriminator_for(code, descriptor.field_number)
        if discriminator is None:
            return descriptor.data_type

        tag = _value_at(tokens, discriminator - index_skew)
        data_type = tag.split(self.config.encoding.component_separator)[0].strip() if tag else ""
        if not data_type:
            return descriptor.data_type

        if trace_logger:
            trace_logger.log_decision(
                f"{code}-{descriptor.field_number} decoded as {data_type}",
                {"discriminator": f"{code}-{discriminator}", "declared_type": descriptor.data_type},
                VerbosityLevel.DETAILED
            )
        return data_type

    def _render_field(self, code: str, descriptor: FieldDescriptor, tokens: List[str], index_skew: int,
                      trace_logger: Optional[TraceLogger]) -> Any:
        raw = _value_at(tokens, descriptor.field_number - index_skew)
        if not raw:
            return None

        encoding = self.config.encoding
        repetitions = raw.split(encoding.repetition_separator)
        repeating = descriptor.cardinality.is_repeating
        data_type = self._resolve_data_type(code, descriptor, tokens, index_skew, trace_logger)
        components = self.field_profile.lookup(data_type)

        if components is None:
            if repeating:
                return repetitions if any(repetitions) else None
            return repetitions[0] or None

        rendered = [self._render_composite(repetition, components) for repetition in repetitions]
        if repeating:
            return [value for value in rendered if value is not None] or None

        # Singular slot: the last repetition overwrites earlier ones
        if trace_logger and len(rendered) > 1 and any(value is not None for value in rendered[:-1]):
            trace_logger.log_reasoning(
                f"{code}-{descriptor.field_number} has {len(rendered)} repetitions for a singular slot; "
                f"keeping the last one",
                {"cardinality": descriptor.cardinality.raw, "field": descriptor.key},
                VerbosityLevel.NORMAL
            )
        return rendered[-1]

    def _render_composite(self, repetition: str, components: Sequence[FieldDescriptor]) -> Optional[Dict[str, Any]]:
        values = repetition.split(self.config.encoding.component_separator)
        composite: Dict[str, Any] = {}
        for component in components:
            value = _value_at(values, component.field_number - 1)
            subcomponents = self.field_profile.lookup(component.data_type)
            if subcomponents:
                composite[component.key] = self._render_subcomponents(value, subcomponents)
            else:
                composite[component.key] = value or None

        if any(value is not None for value in composite.values()):
            return composite
        return None

    def _render_subcomponents(self, value: Optional[str],
                              subcomponents: Sequence[FieldDescriptor]) -> Optional[Dict[str, Any]]:
        parts = value.split(self.config.encoding.subcomponent_separator) if value else None
        rendered = {sub.key: _value_at(parts, sub.field_number - 1) or None for sub in subcomponents}
        if any(part is not None for part in rendered.values()):
            return rendered
        return None
