"""
Template-driven HL7 v2.x to JSON transformer for H2J.

A template is a JSON object whose string leaves are path expressions
(``PID-5.1``, ``PID-3(1)``) and whose arrays mean "one element per matched
segment". Keys starting with ``$$`` take their name from the message.
"""

import copy
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..config.models import H2JConfig
from ..parsers.hl7_parser import HL7Parser
from ..parsers.path_expression import PathExpression
from ..profiles.models import Profile
from ..profiles.resource_manager import ResourceManager
from ..utils.constants import DYNAMIC_KEY_PREFIX
from ..utils.exceptions import ConfigurationError, TemplateError, UnsupportedTemplateError
from ..utils.json_tree import build_skeleton, graft_merge, replace_key
from ..utils.trace_logger import TraceLogger, VerbosityLevel

JsonPath = Tuple[str, ...]


def format_path(path: JsonPath) -> str:
    """Readable location of a template node: ``$.patient.ids[*].value``."""
    text = "$"
    for part in path:
        text += part if part == "[*]" else f".{part}"
    return text


def _is_dynamic(key: str) -> bool:
    return key.startswith(DYNAMIC_KEY_PREFIX) and len(key) > len(DYNAMIC_KEY_PREFIX)


@dataclass(frozen=True)
class _ArrayLeaf:
    """A leaf of an array element: resolved once, read per repetition."""
    expression: Optional[PathExpression]
    result: Optional[List[List[str]]]
    constant: Any = None

    @property
    def count(self) -> int:
        return len(self.result) if self.result else 0


class TemplateTransformer:
    """
    Transforms HL7 messages into the shape of a JSON template.

    The template and profile are read-only once the transformer is built, so
    one instance can serve any number of messages.
    """

    def __init__(self, template: Dict[str, Any], profile: Profile, config: Optional[H2JConfig] = None):
        """
        Args:
            template: Template document (must be a JSON object)
            profile: Profile whose segment definition groups the message
            config: Delimiters and output defaults

        Raises:
            TemplateError: If the template is not a JSON object
        """
        if not isinstance(template, dict):
            raise TemplateError("Template must be a JSON object")
        self.template = copy.deepcopy(template)
        self.profile = profile
        self.config = config or H2JConfig()

    @classmethod
    def from_resources(cls, template_name: str, profile_name: str,
                       resource_manager: Optional[ResourceManager] = None,
                       config: Optional[H2JConfig] = None) -> 'TemplateTransformer':
        """
        Factory that loads the template and profile by resource name.

        Raises:
            TemplateError: If the template cannot be loaded
            ConfigurationError: If the profile cannot be loaded
        """
        config = config or H2JConfig()
        manager = resource_manager or ResourceManager(config.profiles.resources_directory)
        template = manager.load_template(template_name)
        profile = manager.load_profile(profile_name)
        return cls(template, profile, config)

    @classmethod
    def from_content(cls, template: str, profile: Union[str, Dict[str, Any]],
                     config: Optional[H2JConfig] = None) -> 'TemplateTransformer':
        """
        Factory that takes the template and profile as JSON text.

        Raises:
            TemplateError: If the template is not valid JSON
            ConfigurationError: If the profile is not valid JSON or malformed
        """
        try:
            template_document = json.loads(template)
        except json.JSONDecodeError as e:
            raise TemplateError(f"Invalid JSON in template: {e}")

        if isinstance(profile, str):
            try:
                profile = json.loads(profile)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in profile: {e}")

        return cls(template_document, Profile.from_dict(profile), config)

    def transform(self, message: str, concat_delimiter: Optional[str] = None,
                  trace_logger: Optional[TraceLogger] = None) -> Dict[str, Any]:
        """
        Transform an HL7 message into the template's shape.

        Args:
            message: HL7 v2.x message text
            concat_delimiter: None to present repeating values as an array,
                              otherwise the delimiter used to join them
            trace_logger: Optional per-call trace logger

        Returns:
            The populated copy of the template

        Raises:
            HL7ParsingError: If the message is not HL7
            UnsupportedTemplateError: If an array is nested in an array element
        """
        parser = HL7Parser(message, self.profile, self.config.encoding)
        output = copy.deepcopy(self.template)
        self._navigate_object(parser, self.template, output, (), concat_delimiter, trace_logger)
        return output

    def transform_to_string(self, message: str, concat_delimiter: Optional[str] = None,
                            trace_logger: Optional[TraceLogger] = None) -> str:
        return json.dumps(self.transform(message, concat_delimiter, trace_logger), indent=self.config.output.indent)

    def _navigate_object(self, parser: HL7Parser, template: Dict[str, Any], output: Dict[str, Any],
                         path: JsonPath, concat_delimiter: Optional[str],
                         trace_logger: Optional[TraceLogger]) -> None:
        for key, node in template.items():
            node_path = path + (key,)
            if isinstance(node, dict):
                value = output[key]
                self._navigate_object(parser, node, value, node_path, concat_delimiter, trace_logger)
            elif isinstance(node, list):
                value = self._build_array(parser, node, node_path, concat_delimiter, trace_logger)
            elif isinstance(node, str):
                value = self._resolve_leaf(parser, node, concat_delimiter)
            else:
                value = node

            if _is_dynamic(key):
                name = self._property_name(parser, key)
                if name is None and trace_logger:
                    trace_logger.log_decision(
                        f"Dropped property {format_path(node_path)}: dynamic key did not resolve",
                        verbosity_required=VerbosityLevel.NORMAL
                    )
                replace_key(output, key, name, value)
            else:
                output[key] = value

    def _resolve_values(self, parser: HL7Parser, expression: PathExpression) -> List[str]:
        result = parser.get_value(expression.base)
        values = [value for repetition in result or [] for value in repetition]
        return expression.select(values)

    def _resolve_leaf(self, parser: HL7Parser, text: str, concat_delimiter: Optional[str]) -> Any:
        return self._collapse(self._resolve_values(parser, PathExpression.parse(text)), concat_delimiter)

    @staticmethod
    def _collapse(values: Sequence[str], concat_delimiter: Optional[str]) -> Any:
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        if concat_delimiter is None:
            return list(values)
        return concat_delimiter.join(values)

    def _property_name(self, parser: HL7Parser, key: str, repetition: Optional[int] = None) -> Optional[str]:
        expression = PathExpression.parse(key)
        if repetition is not None:
            expression = expression.for_repetition(repetition)
        values = self._resolve_values(parser, expression)
        return values[0] if values else None

    def _build_array(self, parser: HL7Parser, template: List[Any], path: JsonPath,
                     concat_delimiter: Optional[str], trace_logger: Optional[TraceLogger]) -> List[Any]:
        leaves: Dict[JsonPath, _ArrayLeaf] = {}
        for element in template:
            self._collect_leaves(parser, element, (), path + ("[*]",), leaves)

        count = max((leaf.count for leaf in leaves.values()), default=0)
        if trace_logger:
            trace_logger.log_decision(
                f"Expanded {format_path(path)} into {count} element(s)",
                {"leaves": len(leaves)},
                VerbosityLevel.DETAILED
            )

        elements = []
        for index in range(count):
            element: Any = None
            for relative_path, leaf in leaves.items():
                keys = [self._element_key(parser, key, index) for key in relative_path]
                if any(key is None for key in keys):
                    continue
                value = self._value_for_repetition(leaf, index, concat_delimiter)
                skeleton = build_skeleton(keys, value)
                element = skeleton if element is None else graft_merge(element, skeleton)
            elements.append(element)
        return elements

    def _collect_leaves(self, parser: HL7Parser, node: Any, relative_path: JsonPath, path: JsonPath,
                        leaves: Dict[JsonPath, _ArrayLeaf]) -> None:
        if isinstance(node, dict):
            for key, child in node.items():
                self._collect_leaves(parser, child, relative_path + (key,), path + (key,), leaves)
        elif isinstance(node, list):
            raise UnsupportedTemplateError("Unable to parse arrays of arrays", format_path(path))
        elif isinstance(node, str):
            expression = PathExpression.parse(node)
            leaves[relative_path] = _ArrayLeaf(expression, parser.get_value(expression.base))
        else:
            leaves[relative_path] = _ArrayLeaf(None, None, constant=node)

    def _element_key(self, parser: HL7Parser, key: str, index: int) -> Optional[str]:
        if not _is_dynamic(key):
            return key
        return self._property_name(parser, key, repetition=index + 1)

    def _value_for_repetition(self, leaf: _ArrayLeaf, index: int, concat_delimiter: Optional[str]) -> Any:
        if leaf.expression is None:
            return leaf.constant
        if index >= leaf.count:
            return None
        return self._collapse(leaf.expression.select(leaf.result[index]), concat_delimiter)
