"""
Profile (schema) models for H2J.

A profile maps a type identifier (a segment code such as ``PID`` or a
composite data type such as ``CX``) to its ordered field descriptors. The same
lookup describes segment fields, the components of a composite field and the
subcomponents of a component.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from ..utils.constants import PRIMITIVE_TYPE
from ..utils.exceptions import ConfigurationError
from ..utils.strings import normalize


class CardinalityKind(Enum):
    EXACT = "exact"
    UNBOUNDED = "unbounded"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Cardinality:
    """Upper bound of a ``[min..max]`` cardinality string."""
    kind: CardinalityKind
    max: Optional[int] = None
    raw: str = ""

    @property
    def is_repeating(self) -> bool:
        """True when the slot holds an array. Unknown bounds count as singular."""
        if self.kind is CardinalityKind.UNBOUNDED:
            return True
        return self.kind is CardinalityKind.EXACT and self.max > 1

    @classmethod
    def parse(cls, text: Optional[str]) -> 'Cardinality':
        """
        Parse ``[0..1]``, ``[1..*]``, ``[0..5]`` or ``[1]``.

        Never raises: anything unparseable is CardinalityKind.UNKNOWN.
        """
        raw = (text or "").strip()
        if not raw.endswith("]"):
            return cls(CardinalityKind.UNKNOWN, raw=raw)

        range_start = raw.find("..")
        if range_start >= 0:
            upper = raw[range_start + 2:-1]
        elif raw.startswith("["):
            upper = raw[1:-1]
        else:
            return cls(CardinalityKind.UNKNOWN, raw=raw)

        upper = upper.strip()
        if upper == "*":
            return cls(CardinalityKind.UNBOUNDED, raw=raw)
        if upper.isdigit():
            return cls(CardinalityKind.EXACT, int(upper), raw=raw)
        return cls(CardinalityKind.UNKNOWN, raw=raw)


@dataclass(frozen=True)
class FieldDescriptor:
    """One positional field (or component, or subcomponent) of a type."""
    name: str
    field_number: int
    data_type: str = PRIMITIVE_TYPE
    cardinality: Cardinality = field(default_factory=lambda: Cardinality.parse("[0..1]"))

    @property
    def key(self) -> str:
        """Property name used in the JSON output."""
        return normalize(self.name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], type_id: str) -> 'FieldDescriptor':
        if not isinstance(data, dict):
            raise ConfigurationError(f"Field descriptor of '{type_id}' must be an object, got {data!r}")

        name = data.get('name')
        if not name:
            raise ConfigurationError(f"Field descriptor of '{type_id}' is missing 'name'")

        field_number = data.get('fieldNumber')
        if isinstance(field_number, bool) or not isinstance(field_number, int) or field_number < 1:
            raise ConfigurationError(
                f"Field '{name}' of '{type_id}' needs a positive integer 'fieldNumber', got {field_number!r}"
            )

        return cls(
            name=name,
            field_number=field_number,
            data_type=data.get('dataType') or PRIMITIVE_TYPE,
            cardinality=Cardinality.parse(data.get('cardinality'))
        )


@dataclass(frozen=True)
class SegmentConfig:
    """Grouping rule: which segments nest under a segment."""
    cardinality: Cardinality
    children: Mapping[str, 'SegmentConfig']

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SegmentConfig':
        data = data or {}
        return cls(
            cardinality=Cardinality.parse(data.get('cardinality')),
            children=SegmentConfig.parse_definition(data.get('children'))
        )

    @staticmethod
    def parse_definition(section: Optional[Dict[str, Any]]) -> Dict[str, 'SegmentConfig']:
        if not section:
            return {}
        if not isinstance(section, dict):
            raise ConfigurationError(f"Segment definition must be an object, got {section!r}")
        return {code: SegmentConfig.from_dict(child) for code, child in section.items()}


@dataclass(frozen=True)
class Profile:
    """
    Read-only lookup from type identifier to ordered field descriptors.

    Attributes:
        segment_fields: type id -> descriptors sorted by field number
        segment_definition: top-level segment grouping rules (may be empty)
    """
    segment_fields: Mapping[str, Tuple[FieldDescriptor, ...]]
    segment_definition: Mapping[str, SegmentConfig] = field(default_factory=dict)

    def lookup(self, type_id: Optional[str]) -> Optional[Tuple[FieldDescriptor, ...]]:
        """
        Descriptors of ``type_id``, or None when the type is not decomposable.
        """
        if not type_id:
            return None
        return self.segment_fields.get(type_id) or None

    @property
    def type_ids(self) -> Tuple[str, ...]:
        return tuple(self.segment_fields.keys())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Profile':
        """
        Build a profile from a parsed profile document.

        Accepts ``{"segmentFields": {...}, "segmentDefinition": {...}}`` or a
        bare ``{typeId: [descriptor, ...]}`` mapping.

        Raises:
            ConfigurationError: If the document is not shaped like a profile
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Profile document must be a JSON object")

        if 'segmentFields' in data:
            fields_section = data['segmentFields']
            definition = SegmentConfig.parse_definition(data.get('segmentDefinition'))
        else:
            fields_section = data
            definition = {}

        if not isinstance(fields_section, dict):
            raise ConfigurationError("'segmentFields' must map type ids to field lists")

        segment_fields: Dict[str, Tuple[FieldDescriptor, ...]] = {}
        for type_id, descriptors in fields_section.items():
            if not isinstance(descriptors, list):
                raise ConfigurationError(f"Fields of '{type_id}' must be a list")
            parsed = [FieldDescriptor.from_dict(d, type_id) for d in descriptors]
            segment_fields[type_id] = tuple(sorted(parsed, key=lambda d: d.field_number))

        return cls(segment_fields=segment_fields, segment_definition=definition)
