"""
H2J - HL7 v2.x to JSON Converter
================================

Converts HL7 v2.x messages into JSON in two ways:

- HL7JsonTransformer: a direct mapping that mirrors the message's segments,
  fields, components and subcomponents, driven by a segment profile and a
  data type profile.
- TemplateTransformer: fills a caller-supplied JSON template whose leaves are
  path expressions into the message.

Profiles and templates are loaded through ResourceManager; settings live in
an immutable H2JConfig built by ConfigLoader.
"""

__version__ = "1.0.0"

# Main components
from .config.loader import ConfigLoader
from .config.models import H2JConfig
from .converters.hl7_to_json import HL7JsonTransformer
from .converters.template_transformer import TemplateTransformer
from .parsers.hl7_parser import HL7Parser
from .profiles.resource_manager import ResourceManager

__all__ = [
    "__version__",
    "ConfigLoader",
    "H2JConfig",
    "HL7JsonTransformer",
    "TemplateTransformer",
    "HL7Parser",
    "ResourceManager",
]
