"""
Parser for a simplified subset of LaTeX.

The parser is a hand-written recursive-descent parser. Each grammar rule is a
method that either returns the node it parsed (moving the cursor past it), or
records what it expected at the current position and returns None (leaving the
cursor where it was). Whenever the whole document cannot be parsed, the error
reports the furthest position any rule reached, with everything that was
expected there.
"""

import functools
import logging
import re
from typing import Callable, List, Set

from ilatex.latex_ast_node import (
    EMPTY, AssignmentValue, ASTNode, ASTNodeType, CommandValue, EnvironmentValue
)
from ilatex.latex_ast_node_id_generator import ASTNodeIdGenerator
from ilatex.latex_exceptions import LatexParseError
from ilatex.latex_grammar_config import (
    CommandSpecification, EnvironmentSpecification, LatexGrammarConfig,
    ParameterContent, ParameterDelimiter, ParameterSpecification
)
from ilatex.latex_parser_index import ParserIndexer
from ilatex.latex_source_position import SourceFilePosition
from ilatex.latex_source_range import SourceFileRange


ParserRule = Callable[[], ASTNode | None]


# Words written with regular characters, separated by at most one whitespace character
_TEXT_PATTERN = re.compile(r'([^\\$&_%{}#\s]+(\s[^\\$&_%{}#\s])?)+')
_WHITESPACE_PATTERN = re.compile(r'\s+')
_OPTIONAL_WHITESPACE_PATTERN = re.compile(r'\s*')
_COMMENT_PATTERN = re.compile(r'%.*')
_MATH_TEXT_PATTERN = re.compile(r'[^$%]+')
_PARAMETER_PATTERN = re.compile(r'[^%}]*')
_OPTIONAL_PARAMETER_PATTERN = re.compile(r'[^%\]]*')
_PARAMETER_KEY_PATTERN = re.compile(r'[a-z0-9]+', re.IGNORECASE)
_PARAMETER_VALUE_PATTERN = re.compile(r'[^,\]]+')
_ENVIRONMENT_NAME_PATTERN = re.compile(r'[a-z]+\**', re.IGNORECASE)
_ANY_COMMAND_PATTERN = re.compile(r'\\([^a-z]|[a-z]+\*?)', re.IGNORECASE)
_BEGIN_ENVIRONMENT_PATTERN = re.compile(r'begin\{([^}]*)\}')

_SPECIAL_SYMBOL_NAMES = {
    '&': "ampersand",
    '_': "underscore",
    '#': "sharp"
}

_ANY_COMMAND_EXPECTATION = "\\<any command>"
_UNEXPECTED_END_EXPECTATION = "\\<any command> (unexpected \\end)"

DEFAULT_MAX_DEPTH = 100


class LatexParser:
    """
    Parser turning LaTeX source text into an AST.

    Commands and environments listed in the grammar configuration are parsed with
    the parameters they declare; any other command is parsed without parameters,
    and any other environment without parameters around generic LaTeX content.
    """

    def __init__(
        self,
        config: LatexGrammarConfig | None = None,
        id_generator: ASTNodeIdGenerator | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH
    ) -> None:
        """
        Initialize the parser.

        Args:
            config: Known commands and environments (defaults to LatexGrammarConfig.create_default())
            id_generator: Source of node identifiers (a fresh one is used for each parse if None)
            max_depth: Maximum nesting depth of blocks and environments
        """
        self._config = config if config is not None else LatexGrammarConfig.create_default()
        self._shared_id_generator = id_generator
        self._max_depth = max_depth
        self._depth = 0
        self._logger = logging.getLogger("LatexParser")

        self._text = ""
        self._pos = 0
        self._indexer = ParserIndexer("")
        self._id_generator = ASTNodeIdGenerator()
        self._furthest_failure = -1
        self._expected: Set[str] = set()

    @property
    def config(self) -> LatexGrammarConfig:
        """Grammar configuration used by this parser."""
        return self._config

    def parse(self, text: str) -> ASTNode:
        """
        Parse a complete LaTeX document.

        Args:
            text: The source text

        Returns:
            The root node of the AST (of type LATEX)

        Raises:
            LatexParseError: If the text does not match the grammar or is nested too deeply
        """
        self._text = text
        self._pos = 0
        self._indexer = ParserIndexer(text)
        self._id_generator = (
            self._shared_id_generator if self._shared_id_generator is not None else ASTNodeIdGenerator()
        )
        self._furthest_failure = -1
        self._expected = set()
        self._depth = 0

        root = self._parse_latex()
        if root is not None and self._pos < len(text):
            self._expect("EOF")
            root = None

        if root is None:
            position = self._indexer.index_at(max(self._furthest_failure, 0))
            self._logger.debug("Failed to parse LaTeX at %s, expected %s", position, sorted(self._expected))
            raise LatexParseError(position, list(self._expected))

        return root

    # Failure tracking

    def _expect(self, description: str, offset: int | None = None) -> None:
        """Record that something was expected at a given offset (the cursor by default)."""
        if offset is None:
            offset = self._pos

        if offset > self._furthest_failure:
            self._furthest_failure = offset
            self._expected = {description}
            return

        if offset == self._furthest_failure:
            self._expected.add(description)

    # Terminals

    def _match_string(self, expected: str) -> bool:
        if self._text.startswith(expected, self._pos):
            self._pos += len(expected)
            return True

        self._expect(f"'{expected}'")
        return False

    def _match_pattern(self, pattern: re.Pattern, description: str) -> str | None:
        match = pattern.match(self._text, self._pos)
        if match is None:
            self._expect(description)
            return None

        self._pos = match.end()
        return match.group(0)

    def _skip_optional_whitespace(self) -> None:
        match = _OPTIONAL_WHITESPACE_PATTERN.match(self._text, self._pos)
        if match is not None:
            self._pos = match.end()

    def _range(self, start: int, end: int) -> SourceFileRange:
        return SourceFileRange(
            SourceFilePosition.from_parser_index(self._indexer.index_at(start)),
            SourceFilePosition.from_parser_index(self._indexer.index_at(end))
        )

    def _create_node(self, node_type: ASTNodeType, name: str, value, start: int) -> ASTNode:
        return ASTNode(node_type, name, value, self._range(start, self._pos), self._id_generator.new_id())

    def _parse_regex_node(self, pattern: re.Pattern, node_type: ASTNodeType, description: str) -> ASTNode | None:
        start = self._pos
        value = self._match_pattern(pattern, description)
        if value is None:
            return None

        return self._create_node(node_type, "", value, start)

    # Sequences of LaTeX

    def _parse_latex(self) -> ASTNode | None:
        """
        Parse a sequence of LaTeX elements.

        Blocks and environments parse their content with this rule, so the number of
        active calls is the nesting depth. Going deeper than the maximum depth fails
        the whole parse at once.

        Raises:
            LatexParseError: If the maximum nesting depth is exceeded
        """
        if self._depth > self._max_depth:
            position = self._indexer.index_at(self._pos)
            self._logger.debug("LaTeX nested too deeply at %s (max depth: %d)", position, self._max_depth)
            raise LatexParseError(position, [f"nesting depth of at most {self._max_depth}"])

        start = self._pos
        elements: List[ASTNode] = []

        self._depth += 1
        try:
            while True:
                element = self._parse_latex_element()
                if element is None:
                    break

                elements.append(element)

        finally:
            self._depth -= 1

        if not elements:
            return None

        return self._create_node(ASTNodeType.LATEX, "", elements, start)

    def _parse_latex_element(self) -> ASTNode | None:
        for rule in (
            self._parse_comment,
            self._parse_command_or_environment,
            self._parse_math_block,
            self._parse_inline_math_block,
            self._parse_block,
            self._parse_special_symbol,
            self._parse_text,
            self._parse_whitespace
        ):
            node = rule()
            if node is not None:
                return node

        return None

    def _parse_text(self) -> ASTNode | None:
        return self._parse_regex_node(_TEXT_PATTERN, ASTNodeType.TEXT, "text")

    def _parse_whitespace(self) -> ASTNode | None:
        return self._parse_regex_node(_WHITESPACE_PATTERN, ASTNodeType.WHITESPACE, "whitespace")

    def _parse_comment(self) -> ASTNode | None:
        start = self._pos
        value = self._match_pattern(_COMMENT_PATTERN, "comment")
        if value is None:
            return None

        return self._create_node(ASTNodeType.COMMENT, "", value[1:], start)

    def _parse_special_symbol(self) -> ASTNode | None:
        symbol = self._text[self._pos:self._pos + 1]
        if symbol not in _SPECIAL_SYMBOL_NAMES:
            for expected in _SPECIAL_SYMBOL_NAMES:
                self._expect(f"'{expected}'")

            return None

        start = self._pos
        self._pos += 1
        return self._create_node(ASTNodeType.SPECIAL_SYMBOL, _SPECIAL_SYMBOL_NAMES[symbol], symbol, start)

    def _parse_block(self) -> ASTNode | None:
        start = self._pos
        if not self._match_string("{"):
            return None

        content = self._parse_latex()
        if not self._match_string("}"):
            self._pos = start
            return None

        return self._create_node(ASTNodeType.BLOCK, "", content if content is not None else EMPTY, start)

    # Maths

    def _parse_math(self) -> ASTNode | None:
        start = self._pos
        fragments: List[str | ASTNode] = []

        while True:
            comment = self._parse_comment()
            if comment is not None:
                fragments.append(comment)
                continue

            text = self._match_pattern(_MATH_TEXT_PATTERN, "math")
            if text is None:
                break

            fragments.append(text)

        if not fragments:
            return None

        return self._create_node(ASTNodeType.MATH, "", fragments, start)

    def _match_single_dollar(self) -> bool:
        if self._text.startswith("$$", self._pos):
            self._expect("'$' not followed by '$'")
            return False

        return self._match_string("$")

    def _parse_inline_math_block(self) -> ASTNode | None:
        start = self._pos
        if not self._match_single_dollar():
            return None

        math = self._parse_math()
        if math is None or not self._match_single_dollar():
            self._pos = start
            return None

        return self._create_node(ASTNodeType.INLINE_MATH_BLOCK, "", math, start)

    def _parse_math_block(self) -> ASTNode | None:
        start = self._pos
        if not self._match_string("$$"):
            return None

        math = self._parse_math()
        if math is None or not self._match_string("$$"):
            self._pos = start
            return None

        return self._create_node(ASTNodeType.MATH_BLOCK, "", math, start)

    # Parameters

    def _parse_parameter(self) -> ASTNode | None:
        return self._parse_regex_node(_PARAMETER_PATTERN, ASTNodeType.PARAMETER, "parameter")

    def _parse_optional_parameter(self) -> ASTNode | None:
        return self._parse_regex_node(_OPTIONAL_PARAMETER_PATTERN, ASTNodeType.PARAMETER, "optional parameter")

    def _parse_parameter_key(self) -> ASTNode | None:
        return self._parse_regex_node(_PARAMETER_KEY_PATTERN, ASTNodeType.PARAMETER_KEY, "parameter key")

    def _parse_parameter_value(self) -> ASTNode | None:
        return self._parse_regex_node(_PARAMETER_VALUE_PATTERN, ASTNodeType.PARAMETER_VALUE, "parameter value")

    def _parse_parameter_assignment(self) -> ASTNode | None:
        start = self._pos
        key = self._parse_parameter_key()
        if key is None:
            return None

        self._skip_optional_whitespace()
        if not self._match_string("="):
            self._pos = start
            return None

        self._skip_optional_whitespace()
        value = self._parse_parameter_value()
        if value is None:
            self._pos = start
            return None

        return self._create_node(ASTNodeType.PARAMETER_ASSIGNMENT, key.value, AssignmentValue(key, value), start)

    def _parse_parameter_list_item(self) -> ASTNode | None:
        assignment = self._parse_parameter_assignment()
        if assignment is not None:
            return assignment

        return self._parse_parameter_value()

    def _parse_parameter_list(self) -> ASTNode | None:
        start = self._pos
        items: List[ASTNode] = []

        item = self._parse_parameter_list_item()
        if item is not None:
            items.append(item)

            while True:
                separator_start = self._pos
                self._skip_optional_whitespace()
                if not self._match_string(","):
                    self._pos = separator_start
                    break

                self._skip_optional_whitespace()
                item = self._parse_parameter_list_item()
                if item is None:
                    self._pos = separator_start
                    break

                items.append(item)

        return self._create_node(ASTNodeType.PARAMETER_LIST, "", items, start)

    def _content_rule(self, content: ParameterContent) -> ParserRule:
        if content == ParameterContent.PARAMETER_LIST:
            return self._parse_parameter_list

        if content == ParameterContent.OPTIONAL_PARAMETER:
            return self._parse_optional_parameter

        return self._parse_parameter

    def _parse_parameter_block(self, delimiter: ParameterDelimiter, content_rule: ParserRule) -> ASTNode | None:
        if delimiter == ParameterDelimiter.CURLY:
            opening, closing, node_type = "{", "}", ASTNodeType.CURLY_BRACES_PARAMETER_BLOCK

        else:
            opening, closing, node_type = "[", "]", ASTNodeType.SQUARE_BRACES_PARAMETER_BLOCK

        start = self._pos
        if not self._match_string(opening):
            return None

        content = content_rule()
        if content is None or not self._match_string(closing):
            self._pos = start
            return None

        return self._create_node(node_type, "", content, start)

    def _parse_parameter_slots(self, parameters: List[ParameterSpecification]) -> List[List[ASTNode]] | None:
        """
        Parse the declared parameters of a command or an environment.

        Each slot is an empty list when an optional parameter is absent, and a list
        with one parameter block otherwise. None is returned if a mandatory parameter
        is missing.
        """
        start = self._pos
        slots: List[List[ASTNode]] = []

        for parameter in parameters:
            block = self._parse_parameter_block(parameter.delimiter, self._content_rule(parameter.content))
            if block is not None:
                slots.append([block])
                continue

            if not parameter.optional:
                self._pos = start
                return None

            slots.append([])

        return slots

    # Commands and environments

    def _parse_command_or_environment(self) -> ASTNode | None:
        if not self._text.startswith("\\", self._pos):
            self._expect(_ANY_COMMAND_EXPECTATION)
            return None

        rule = self._select_command_rule(self._pos)
        if rule is None:
            return None

        return rule()

    def _select_command_rule(self, index: int) -> ParserRule | None:
        """
        Choose the rule that must parse the command starting at the given backslash.

        Nothing is consumed. None is returned (with an expectation recorded) when
        no command may start here.
        """
        remaining_start = index + 1

        if self._text.startswith("begin{", remaining_start):
            match = _BEGIN_ENVIRONMENT_PATTERN.match(self._text, remaining_start)
            environment = self._config.find_environment(match.group(1)) if match is not None else None
            if environment is not None:
                return functools.partial(self._parse_known_environment, environment)

            return self._parse_any_environment

        # \end commands may only be read by the environment that expects them
        if self._text.startswith("end{", remaining_start):
            self._expect(_UNEXPECTED_END_EXPECTATION, index)
            return None

        for name in self._config.command_names:
            if self._is_known_command_at(name, remaining_start):
                command = self._config.find_command(name)
                if command is not None:
                    return functools.partial(self._parse_known_command, command)

        return self._parse_any_command

    def _is_known_command_at(self, name: str, index: int) -> bool:
        if not self._text.startswith(name, index):
            return False

        # \foo must not match the beginning of \foobar
        end = index + len(name)
        if name[-1].isalpha() and end < len(self._text) and self._text[end].isalpha():
            return False

        return True

    def _parse_command(self, name: str, parameters: List[ParameterSpecification]) -> ASTNode | None:
        start = self._pos
        if not self._match_string("\\" + name):
            return None

        name_range = self._range(start + 1, self._pos)
        slots = self._parse_parameter_slots(parameters)
        if slots is None:
            self._pos = start
            return None

        return self._create_node(ASTNodeType.COMMAND, name, CommandValue(name, name_range, slots), start)

    def _parse_known_command(self, command: CommandSpecification) -> ASTNode | None:
        return self._parse_command(command.name, command.parameters)

    def _parse_any_command(self) -> ASTNode | None:
        start = self._pos
        text = self._match_pattern(_ANY_COMMAND_PATTERN, _ANY_COMMAND_EXPECTATION)
        if text is None:
            return None

        name = text[1:]
        name_range = self._range(start + 1, self._pos)
        return self._create_node(ASTNodeType.COMMAND, name, CommandValue(name, name_range, []), start)

    def _parse_environment_delimiter(self, command_name: str, name_rule: ParserRule) -> ASTNode | None:
        """Parse a \\begin{...} or \\end{...} command."""
        start = self._pos
        if not self._match_string("\\" + command_name):
            return None

        name_range = self._range(start + 1, self._pos)
        block = self._parse_parameter_block(ParameterDelimiter.CURLY, name_rule)
        if block is None:
            self._pos = start
            return None

        return self._create_node(
            ASTNodeType.COMMAND,
            command_name,
            CommandValue(command_name, name_range, [[block]]),
            start
        )

    def _parse_environment_name(self, name: str) -> ASTNode | None:
        start = self._pos
        if not self._match_string(name):
            return None

        return self._create_node(ASTNodeType.PARAMETER, "", name, start)

    def _parse_any_environment_name(self) -> ASTNode | None:
        return self._parse_regex_node(_ENVIRONMENT_NAME_PATTERN, ASTNodeType.PARAMETER, "environment name")

    def _parse_environment_content(self) -> ASTNode:
        content = self._parse_latex()
        if content is not None:
            return content

        return self._create_node(ASTNodeType.LATEX, "", [], self._pos)

    def _parse_environment(
        self,
        name_rule: ParserRule,
        parameters: List[ParameterSpecification]
    ) -> ASTNode | None:
        start = self._pos
        begin = self._parse_environment_delimiter("begin", name_rule)
        if begin is None:
            return None

        name = begin.value.parameters[0][0].value.value
        slots = self._parse_parameter_slots(parameters)
        if slots is None:
            self._pos = start
            return None

        content = self._parse_environment_content()
        end = self._parse_environment_delimiter("end", functools.partial(self._parse_environment_name, name))
        if end is None:
            self._pos = start
            return None

        return self._create_node(ASTNodeType.ENVIRONMENT, name, EnvironmentValue(begin, slots, content, end), start)

    def _parse_known_environment(self, environment: EnvironmentSpecification) -> ASTNode | None:
        return self._parse_environment(
            functools.partial(self._parse_environment_name, environment.name),
            environment.parameters
        )

    def _parse_any_environment(self) -> ASTNode | None:
        return self._parse_environment(self._parse_any_environment_name, [])


def parse_latex(
    text: str,
    config: LatexGrammarConfig | None = None,
    id_generator: ASTNodeIdGenerator | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH
) -> ASTNode:
    """
    Parse a LaTeX document.

    Args:
        text: The source text
        config: Known commands and environments (defaults to LatexGrammarConfig.create_default())
        id_generator: Source of node identifiers (a fresh one if None)
        max_depth: Maximum nesting depth of blocks and environments

    Returns:
        The root node of the AST

    Raises:
        LatexParseError: If the text does not match the grammar or is nested too deeply
    """
    return LatexParser(config, id_generator, max_depth).parse(text)
