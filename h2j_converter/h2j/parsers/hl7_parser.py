"""
HL7 v2.x message parser for H2J.

Splits a raw message into segments (python-hl7 does the tokenizing), nests
the segments into a hierarchy using the profile's grouping rules and
resolves location paths (``PID-3``, ``OBX[2]-5.1``) to the matched values.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import hl7

from .path_expression import HL7Path, SegmentFilter
from ..config.models import EncodingConfig
from ..profiles.models import Profile, SegmentConfig
from ..utils.constants import SEGMENT_TERMINATOR
from ..utils.exceptions import HL7ParsingError


@dataclass(frozen=True)
class HL7Hierarchy:
    """A segment and the segments grouped under it. The root has no text."""
    segment: str
    children: Tuple['HL7Hierarchy', ...] = ()

    @property
    def segment_code(self) -> str:
        return self.segment[:3]

    def outline(self) -> List[Dict[str, Any]]:
        """Segment codes of the children, nested the same way."""
        return [
            {'segment': child.segment_code, 'children': child.outline()}
            for child in self.children
        ]


class _Node:
    __slots__ = ('segment', 'children')

    def __init__(self, segment: str):
        self.segment = segment
        self.children: List['_Node'] = []

    def freeze(self) -> HL7Hierarchy:
        return HL7Hierarchy(self.segment, tuple(child.freeze() for child in self.children))


class HL7Parser:
    """
    Parsed view of one HL7 message.

    Attributes:
        segments: Raw segment texts in message order
        profile: Profile whose segment definition drives the hierarchy (optional)
        encoding: Delimiters used to split fields, repetitions and components
    """

    def __init__(self, message: str, profile: Optional[Profile] = None,
                 encoding: Optional[EncodingConfig] = None):
        self.profile = profile
        self.encoding = encoding or EncodingConfig()
        self.segments: Tuple[str, ...] = self._tokenize(message)
        self._hierarchy: Optional[HL7Hierarchy] = None

    @staticmethod
    def _tokenize(message: Any) -> Tuple[str, ...]:
        """
        Split the message into segment texts.

        Raises:
            HL7ParsingError: If the text is not an HL7 v2.x message
        """
        if isinstance(message, bytes):
            message = message.decode('utf-8')
        if not isinstance(message, str):
            raise HL7ParsingError(f"HL7 message must be text, got {type(message).__name__}")

        # HL7 expects \r between segments; files usually carry \n or \r\n
        normalized = message.replace("\r\n", SEGMENT_TERMINATOR).replace("\n", SEGMENT_TERMINATOR).strip()
        if not hl7.ishl7(normalized):
            raise HL7ParsingError("Message must start with an MSH segment")

        try:
            parsed = hl7.parse(normalized)
        except Exception as e:
            raise HL7ParsingError(f"Failed to parse HL7 v2 message: {e}") from e

        segments = (str(segment) for segment in parsed)
        return tuple(segment for segment in segments if segment.strip())

    def msg_hierarchy(self) -> HL7Hierarchy:
        """
        Nest segments according to the profile's segment definition.

        A segment becomes the child of the closest open segment whose
        definition lists its code; when none does, it hangs off the root.
        Without a definition every segment is a child of the root.
        """
        if self._hierarchy is None:
            definition = self.profile.segment_definition if self.profile else {}
            root = _Node("")
            stack: List[Tuple[_Node, Mapping[str, SegmentConfig]]] = [(root, definition)]

            for segment in self.segments:
                code = segment[:3]
                while len(stack) > 1 and code not in stack[-1][1]:
                    stack.pop()
                parent, allowed = stack[-1]
                node = _Node(segment)
                parent.children.append(node)
                config = allowed.get(code)
                stack.append((node, config.children if config else {}))

            self._hierarchy = root.freeze()
        return self._hierarchy

    def get_value(self, path: str) -> Optional[List[List[str]]]:
        """
        Resolve a location path.

        Returns:
            One entry per matched segment, each holding the values of the
            field's repetitions (narrowed to the component/subcomponent when
            the path names one). A segment whose field is empty yields an
            empty entry. None when no segment matches or the path is invalid.
        """
        location = HL7Path.parse(path) if path else None
        if location is None:
            return None

        segments = [s for s in self.segments if s[:3] == location.segment]
        if location.segment_filter is not None:
            segments = [s for s in segments if self._matches(s, location.segment_filter)]
        if location.segment_index is not None:
            position = location.segment_index - 1
            segments = [segments[position]] if 0 <= position < len(segments) else []
        if not segments:
            return None

        if location.field is None:
            return [[segment] for segment in segments]
        return [self._field_values(segment, location) for segment in segments]

    def first_value(self, path: str) -> Optional[str]:
        for values in self.get_value(path) or []:
            for value in values:
                return value
        return None

    def analyze(self) -> Dict[str, Any]:
        """Summary of the message: header identifiers, segment counts, hierarchy."""
        counts: Dict[str, int] = {}
        for segment in self.segments:
            counts[segment[:3]] = counts.get(segment[:3], 0) + 1

        return {
            'message_type': self.first_value(f"{self.encoding.header_segment}-9"),
            'control_id': self.first_value(f"{self.encoding.header_segment}-10"),
            'version': self.first_value(f"{self.encoding.header_segment}-12"),
            'segment_count': len(self.segments),
            'segment_counts': counts,
            'hierarchy': self.msg_hierarchy().outline(),
        }

    def _is_header(self, segment: str) -> bool:
        return segment[:3] == self.encoding.header_segment

    def _field_value(self, segment: str, field_number: int) -> Optional[str]:
        if self._is_header(segment):
            if field_number == 1:
                return self.encoding.field_separator
            position = field_number - 1
        else:
            position = field_number
        tokens = segment.split(self.encoding.field_separator)
        return tokens[position] if position < len(tokens) else None

    @staticmethod
    def _part(value: str, separator: str, number: int) -> str:
        parts = value.split(separator)
        return parts[number - 1] if 0 < number <= len(parts) else ""

    def _matches(self, segment: str, segment_filter: SegmentFilter) -> bool:
        raw = self._field_value(segment, segment_filter.field) or ""
        value = raw.split(self.encoding.repetition_separator)[0]
        if segment_filter.component is not None:
            value = self._part(value, self.encoding.component_separator, segment_filter.component)
        return value == segment_filter.value

    def _field_values(self, segment: str, location: HL7Path) -> List[str]:
        raw = self._field_value(segment, location.field)
        if not raw:
            return []
        # MSH-1 and MSH-2 are the delimiters themselves
        if self._is_header(segment) and location.field in (1, 2):
            return [raw]

        repetitions = raw.split(self.encoding.repetition_separator)
        if location.repetition is not None:
            position = location.repetition - 1
            repetitions = [repetitions[position]] if 0 <= position < len(repetitions) else []

        values = []
        for repetition in repetitions:
            value = repetition
            if location.component is not None:
                value = self._part(value, self.encoding.component_separator, location.component)
                if location.subcomponent is not None:
                    value = self._part(value, self.encoding.subcomponent_separator, location.subcomponent)
            values.append(value)
        return values if any(values) else []
