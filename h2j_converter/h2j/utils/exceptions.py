"""
Custom exception hierarchy for H2J.

Ordinary absence of data in a message is never an error. These exceptions
cover configuration and resource problems, which surface when a transformer
is built, and the one template shape the template engine refuses to handle.
"""


class H2JError(Exception):
    """
    Base exception class for all H2J errors.

    All custom exceptions in the H2J system inherit from this base class
    to provide consistent error handling and identification.
    """
    pass


class ConfigurationError(H2JError):
    """
    Exception raised for configuration and profile errors.

    This includes:
    - Missing configuration or profile files
    - Invalid JSON in configuration or profile files
    - Invalid delimiter settings or verbosity levels
    - Malformed field descriptors (missing or non-positive fieldNumber)
    """
    pass


class HL7ParsingError(H2JError):
    """
    Exception raised when the input is not an HL7 v2.x message.

    Missing segments, fields or components are not parsing errors; they
    resolve to null values in the output.
    """
    pass


class TemplateError(H2JError):
    """
    Exception raised for template-related errors.

    This includes:
    - Missing template files
    - Invalid JSON in template files
    - Templates whose root is not a JSON object
    """
    pass


class UnsupportedTemplateError(TemplateError):
    """
    Raised when a template array holds another array inside its element.

    Attributes:
        path: Location of the offending array inside the template
    """

    def __init__(self, message: str, path: str):
        super().__init__(f"{message} (at {path})")
        self.path = path
