"""
Typed path expressions.

Two small grammars are parsed here, once, into frozen values:

- ``PathExpression``: a template leaf, ``<base><selector>?`` where the
  selector is a trailing ``(N)`` picking the N-th (0-based) resolved value.
  A leading ``$$`` marks a dynamic property name.
- ``HL7Path``: the location a base expression points at inside a message,
  ``SEG[idx]-FIELD[rep].COMP.SUB`` with 1-based indices, ``[*]`` for "all",
  and ``SEG[@F.C='value']`` to keep only segments whose field matches.
"""

import re
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from ..utils.constants import DYNAMIC_KEY_PREFIX, REPEAT_ALL_MARKER

_SELECTOR = re.compile(r"\((\d+)\)$")

_HL7_PATH = re.compile(
    r"^(?P<segment>[A-Z][A-Z0-9]{2})"
    r"(?:\[(?:(?P<segment_index>\d+|\*)"
    r"|@(?P<filter_field>\d+)(?:\.(?P<filter_component>\d+))?\s*=\s*'(?P<filter_value>[^']*)')\])?"
    r"(?:-(?P<field>\d+)"
    r"(?:\[(?P<repetition>\d+|\*)\])?"
    r"(?:\.(?P<component>\d+)"
    r"(?:\.(?P<subcomponent>\d+))?)?)?$"
)


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value == "*":
        return None
    return int(value)


@dataclass(frozen=True)
class PathExpression:
    """A template leaf (or ``$$`` key) parsed into its parts."""
    base: str
    index: Optional[int] = None
    dynamic_key: bool = False

    @classmethod
    def parse(cls, text: str) -> 'PathExpression':
        text = text.strip()
        dynamic_key = text.startswith(DYNAMIC_KEY_PREFIX)
        if dynamic_key:
            text = text[len(DYNAMIC_KEY_PREFIX):]

        match = _SELECTOR.search(text)
        if match:
            return cls(base=text[:match.start()], index=int(match.group(1)), dynamic_key=dynamic_key)
        return cls(base=text, dynamic_key=dynamic_key)

    def select(self, values: Sequence[str]) -> List[str]:
        """Apply the ``(N)`` selector; out of range leaves nothing."""
        if self.index is None:
            return list(values)
        if self.index < len(values):
            return [values[self.index]]
        return []

    def for_repetition(self, number: int) -> 'PathExpression':
        """Pin every ``[*]`` in the base to the given 1-based repetition."""
        return replace(self, base=self.base.replace(REPEAT_ALL_MARKER, f"[{number}]"))


@dataclass(frozen=True)
class SegmentFilter:
    field: int
    component: Optional[int]
    value: str


@dataclass(frozen=True)
class HL7Path:
    """A location inside a message."""
    segment: str
    segment_index: Optional[int] = None
    segment_filter: Optional[SegmentFilter] = None
    field: Optional[int] = None
    repetition: Optional[int] = None
    component: Optional[int] = None
    subcomponent: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> Optional['HL7Path']:
        """Parse a location; None when the text is not a valid location."""
        match = _HL7_PATH.match(text.strip())
        if not match:
            return None

        segment_filter = None
        if match.group('filter_field'):
            segment_filter = SegmentFilter(
                field=int(match.group('filter_field')),
                component=_optional_int(match.group('filter_component')),
                value=match.group('filter_value')
            )

        return cls(
            segment=match.group('segment'),
            segment_index=_optional_int(match.group('segment_index')),
            segment_filter=segment_filter,
            field=_optional_int(match.group('field')),
            repetition=_optional_int(match.group('repetition')),
            component=_optional_int(match.group('component')),
            subcomponent=_optional_int(match.group('subcomponent'))
        )
