"""
Constants for the H2J converter.

HL7 v2.x delimiters, well-known segment and property names, and the default
resource names used when no configuration file is supplied.
"""

# Standard HL7 v2.x encoding characters
FIELD_SEPARATOR = "|"
COMPONENT_SEPARATOR = "^"
REPETITION_SEPARATOR = "~"
ESCAPE_CHARACTER = "\\"
SUBCOMPONENT_SEPARATOR = "&"
SEGMENT_TERMINATOR = "\r"

# Message header segment; MSH-1 is the field separator itself, so every
# following MSH field sits one position earlier once the text is split.
HEADER_SEGMENT = "MSH"
HEADER_FIELD_SEPARATOR_KEY = "field_separator"
HEADER_ENCODING_CHARACTERS_KEY = "encoding_characters"

# Output tree
CHILDREN_KEY = "children"
PRIMITIVE_TYPE = "primitive"

# Fields whose data type is carried by a sibling field of the same segment:
# segment code -> {field number: discriminator field number}
RUNTIME_TYPED_FIELDS = {
    "OBX": {5: 2},
}

# Template syntax
DYNAMIC_KEY_PREFIX = "$$"
REPEAT_ALL_MARKER = "[*]"

# Default resources
DEFAULT_PROFILE = "PhinGuideProfile.json"
DEFAULT_FIELD_PROFILE = "DefaultFieldsProfile.json"
DEFAULT_TEMPLATE = "simpleTemplate.json"

# File extensions accepted for HL7 message input
FILE_EXTENSIONS = {
    'HL7': '.hl7',
    'TXT': '.txt',
}

