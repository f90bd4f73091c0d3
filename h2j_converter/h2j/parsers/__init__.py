"""
Parsers module for H2J.

This module contains the HL7 message parser (segment hierarchy and path
resolution) and the typed path expression parsers.
"""

from .hl7_parser import HL7Hierarchy, HL7Parser
from .path_expression import HL7Path, PathExpression, SegmentFilter

__all__ = [
    "HL7Hierarchy",
    "HL7Parser",
    "HL7Path",
    "PathExpression",
    "SegmentFilter",
]
