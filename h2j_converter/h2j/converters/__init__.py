"""
Converters module for H2J.

This module contains the two transformation engines: the direct,
profile-driven mapping and the template-driven mapping.
"""

from .hl7_to_json import HL7JsonTransformer
from .template_transformer import TemplateTransformer

__all__ = ["HL7JsonTransformer", "TemplateTransformer"]
