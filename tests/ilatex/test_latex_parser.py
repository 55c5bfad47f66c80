"""Tests for the LaTeX parser."""

import pytest

from ilatex.latex_ast_node import EMPTY, ASTNodeType, CommandValue, EnvironmentValue
from ilatex.latex_ast_node_id_generator import ASTNodeIdGenerator
from ilatex.latex_exceptions import LatexParseError
from ilatex.latex_grammar_config import (
    CommandSpecification, LatexGrammarConfig, ParameterContent, ParameterDelimiter, ParameterSpecification
)
from ilatex.latex_parser import LatexParser, parse_latex
from ilatex.latex_parser_index import ParserIndexer

from latex_test_helpers import collect_nodes, nodes_of_type, range_offsets


def child_types(node):
    """Get the types of the children of a node."""
    return [child.type for child in node.children()]


class TestTextAndWhitespace:
    """Test parsing regular text."""

    def test_single_word(self, parser):
        """Test parsing a single word."""
        root = parser.parse("Hello")

        assert root.type == ASTNodeType.LATEX
        assert child_types(root) == [ASTNodeType.TEXT]
        assert root.value[0].value == "Hello"
        assert range_offsets(root) == (0, 5)

    def test_words_separated_by_single_spaces(self, parser):
        """Test that words separated by single whitespace characters form one text node."""
        root = parser.parse("Hello big world")

        assert child_types(root) == [ASTNodeType.TEXT]
        assert root.value[0].value == "Hello big world"

    def test_words_separated_by_several_spaces(self, parser):
        """Test that several whitespace characters form a whitespace node."""
        root = parser.parse("a  b")

        assert child_types(root) == [ASTNodeType.TEXT, ASTNodeType.WHITESPACE, ASTNodeType.TEXT]
        assert root.value[1].value == "  "
        assert range_offsets(root.value[2]) == (3, 4)

    def test_leading_whitespace(self, parser):
        """Test that a document can start with whitespace."""
        root = parser.parse("\n\nabc")

        assert child_types(root) == [ASTNodeType.WHITESPACE, ASTNodeType.TEXT]
        assert root.value[1].range.from_.line == 2
        assert root.value[1].range.from_.column == 0


class TestComments:
    """Test parsing comments."""

    def test_comment_runs_to_end_of_line(self, parser):
        """Test that a comment stops at the end of its line."""
        root = parser.parse("Hello % a comment\nworld")

        assert child_types(root) == [
            ASTNodeType.TEXT,
            ASTNodeType.WHITESPACE,
            ASTNodeType.COMMENT,
            ASTNodeType.WHITESPACE,
            ASTNodeType.TEXT
        ]
        assert root.value[2].value == " a comment"
        assert range_offsets(root.value[2]) == (6, 17)

    def test_comment_at_end_of_document(self, parser):
        """Test a comment without a trailing newline."""
        root = parser.parse("%")

        assert child_types(root) == [ASTNodeType.COMMENT]
        assert root.value[0].value == ""


class TestSpecialSymbols:
    """Test parsing special symbols."""

    def test_special_symbols(self, parser):
        """Test that each special symbol is named after the symbol."""
        root = parser.parse("a&b_c#")
        symbols = nodes_of_type(root, ASTNodeType.SPECIAL_SYMBOL)

        assert [(symbol.name, symbol.value) for symbol in symbols] == [
            ("ampersand", "&"),
            ("underscore", "_"),
            ("sharp", "#")
        ]


class TestMath:
    """Test parsing inline and display math."""

    def test_inline_math(self, parser):
        """Test parsing inline math."""
        root = parser.parse("$x^2$")
        block = root.value[0]

        assert block.type == ASTNodeType.INLINE_MATH_BLOCK
        assert range_offsets(block) == (0, 5)
        assert block.value.type == ASTNodeType.MATH
        assert block.value.value == ["x^2"]
        assert range_offsets(block.value) == (1, 4)

    def test_display_math(self, parser):
        """Test parsing display math."""
        root = parser.parse("$$a+b$$")
        block = root.value[0]

        assert block.type == ASTNodeType.MATH_BLOCK
        assert block.value.value == ["a+b"]
        assert range_offsets(block) == (0, 7)

    def test_math_with_comment(self, parser):
        """Test that comments inside math are kept as comment nodes."""
        root = parser.parse("$a % c\nb$")
        math = root.value[0].value

        assert len(math.value) == 3
        assert math.value[0] == "a "
        assert math.value[1].type == ASTNodeType.COMMENT
        assert math.value[1].value == " c"
        assert math.value[2] == "\nb"
        assert child_types(math) == [ASTNodeType.COMMENT]

    def test_math_between_text(self, parser):
        """Test inline math surrounded by text."""
        root = parser.parse("if $x$ then")

        assert child_types(root) == [
            ASTNodeType.TEXT,
            ASTNodeType.WHITESPACE,
            ASTNodeType.INLINE_MATH_BLOCK,
            ASTNodeType.WHITESPACE,
            ASTNodeType.TEXT
        ]

    def test_empty_inline_math_fails(self, parser):
        """Test that math must not be empty."""
        with pytest.raises(LatexParseError):
            parser.parse("$$")

    def test_unclosed_inline_math_fails(self, parser):
        """Test that unclosed math does not parse."""
        with pytest.raises(LatexParseError):
            parser.parse("$x")


class TestBlocks:
    """Test parsing curly braces blocks."""

    def test_block_with_content(self, parser):
        """Test that a block wraps a LaTeX node."""
        root = parser.parse("{abc}")
        block = root.value[0]

        assert block.type == ASTNodeType.BLOCK
        assert block.value.type == ASTNodeType.LATEX
        assert block.value.value[0].value == "abc"
        assert range_offsets(block) == (0, 5)

    def test_empty_block(self, parser):
        """Test that an empty block holds the empty marker."""
        root = parser.parse("{}")
        block = root.value[0]

        assert block.value is EMPTY
        assert block.children() == []

    def test_nested_blocks(self, parser):
        """Test nested blocks."""
        root = parser.parse("{{a}}")

        assert root.value[0].value.value[0].type == ASTNodeType.BLOCK


class TestGenericCommands:
    """Test parsing commands that are not known by the grammar."""

    def test_command_name(self, parser):
        """Test that the name of a command excludes the backslash."""
        root = parser.parse("\\foo bar")
        command = root.value[0]

        assert command.type == ASTNodeType.COMMAND
        assert command.name == "foo"
        assert isinstance(command.value, CommandValue)
        assert command.value.name == "foo"
        assert command.value.parameters == []
        assert range_offsets(command) == (0, 4)
        assert command.value.name_range.from_.column == 1
        assert command.value.name_range.to.column == 4
        assert child_types(root) == [ASTNodeType.COMMAND, ASTNodeType.WHITESPACE, ASTNodeType.TEXT]

    def test_starred_command(self, parser):
        """Test that a star is part of a command name."""
        root = parser.parse("\\section*{Intro}")

        assert root.value[0].name == "section*"
        assert root.value[1].type == ASTNodeType.BLOCK

    def test_symbol_command(self, parser):
        """Test commands made of a single non-letter character."""
        root = parser.parse("50\\%")

        assert root.value[1].type == ASTNodeType.COMMAND
        assert root.value[1].name == "%"

    def test_known_name_prefix(self, parser):
        """Test that a known command name followed by letters is a generic command."""
        root = parser.parse("\\includegraphicsx{a}")

        assert root.value[0].name == "includegraphicsx"
        assert root.value[0].value.parameters == []
        assert root.value[1].type == ASTNodeType.BLOCK

    def test_trailing_backslash_fails(self, parser):
        """Test that a lone backslash at the end of the document does not parse."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("abc\\")

        assert exc_info.value.position.offset == 3


class TestKnownCommands:
    """Test parsing commands with their own grammar."""

    def test_includegraphics_with_options(self, parser):
        """Test parsing includegraphics with a list of options."""
        root = parser.parse("\\includegraphics[width=3cm, scale = 2]{cat.png}")
        command = root.value[0]

        assert command.name == "includegraphics"
        assert len(command.value.parameters) == 2

        options = command.value.parameters[0][0]
        assert options.type == ASTNodeType.SQUARE_BRACES_PARAMETER_BLOCK
        assert options.value.type == ASTNodeType.PARAMETER_LIST

        assignments = options.value.value
        assert [assignment.type for assignment in assignments] == [ASTNodeType.PARAMETER_ASSIGNMENT] * 2
        assert assignments[0].name == "width"
        assert assignments[0].value.key.value == "width"
        assert assignments[0].value.value.value == "3cm"
        assert assignments[1].value.key.value == "scale"
        assert assignments[1].value.value.value == "2"

        path = command.value.parameters[1][0]
        assert path.type == ASTNodeType.CURLY_BRACES_PARAMETER_BLOCK
        assert path.value.type == ASTNodeType.PARAMETER
        assert path.value.value == "cat.png"

    def test_includegraphics_without_options(self, parser):
        """Test that an absent optional parameter is an empty slot."""
        root = parser.parse("\\includegraphics{cat.png}")
        command = root.value[0]

        assert command.value.parameters[0] == []
        assert len(command.value.parameters[1]) == 1
        assert range_offsets(command) == (0, 25)

    def test_includegraphics_with_plain_value(self, parser):
        """Test a parameter list holding a value without key."""
        root = parser.parse("\\includegraphics[draft]{a.png}")
        items = root.value[0].value.parameters[0][0].value.value

        assert len(items) == 1
        assert items[0].type == ASTNodeType.PARAMETER_VALUE
        assert items[0].value == "draft"

    def test_includegraphics_with_empty_options(self, parser):
        """Test an empty parameter list."""
        root = parser.parse("\\includegraphics[]{a.png}")
        options = root.value[0].value.parameters[0][0]

        assert options.value.type == ASTNodeType.PARAMETER_LIST
        assert options.value.value == []

    def test_includegraphics_without_path_fails(self, parser):
        """Test that a missing mandatory parameter does not parse."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("\\includegraphics[width=1cm]")

        assert "'{'" in exc_info.value.expected

    def test_line_break(self, parser):
        """Test the line break command and its optional spacing."""
        root = parser.parse("a\\\\[2pt]b")
        command = root.value[1]

        assert command.type == ASTNodeType.COMMAND
        assert command.name == "\\"
        assert command.value.parameters[0][0].value.value == "2pt"
        assert root.value[2].value == "b"

    def test_line_break_without_spacing(self, parser):
        """Test the line break command without its optional parameter."""
        root = parser.parse("a\\\\b")

        assert root.value[1].name == "\\"
        assert root.value[1].value.parameters == [[]]

    def test_custom_command(self):
        """Test a command declared in a custom configuration."""
        config = LatexGrammarConfig(known_commands=[
            CommandSpecification("textbf", [
                ParameterSpecification(ParameterDelimiter.CURLY, ParameterContent.PARAMETER)
            ])
        ])
        root = LatexParser(config).parse("\\textbf{bold}")
        command = root.value[0]

        assert command.value.parameters[0][0].value.value == "bold"


class TestEnvironments:
    """Test parsing environments."""

    def test_known_environment(self, parser):
        """Test that a known environment is parsed with its declared parameters."""
        root = parser.parse("\\begin{tabular}{c}X\\end{tabular}")
        environment = root.value[0]

        assert environment.type == ASTNodeType.ENVIRONMENT
        assert environment.name == "tabular"
        assert isinstance(environment.value, EnvironmentValue)
        assert len(environment.value.parameters) == 1
        assert environment.value.parameters[0][0].value.value == "c"
        assert environment.value.content.value[0].value == "X"
        assert environment.value.begin.name == "begin"
        assert environment.value.begin.value.parameters[0][0].value.value == "tabular"
        assert environment.value.end.name == "end"

    def test_generic_environment(self, parser):
        """Test that an unknown environment has no parameters."""
        root = parser.parse("\\begin{foo}X\\end{foo}")
        environment = root.value[0]

        assert environment.name == "foo"
        assert environment.value.parameters == []
        assert environment.value.content.value[0].value == "X"

    def test_generic_environment_with_block_after_begin(self, parser):
        """Test that an unknown environment reads curly braces as content."""
        root = parser.parse("\\begin{foo}{c}X\\end{foo}")
        content = root.value[0].value.content

        assert child_types(content) == [ASTNodeType.BLOCK, ASTNodeType.TEXT]

    def test_starred_generic_environment(self, parser):
        """Test a generic environment with a starred name."""
        root = parser.parse("\\begin{align*}x\\end{align*}")

        assert root.value[0].name == "align*"

    def test_known_environment_name_prefix(self, parser):
        """Test that a name starting with a known name is a generic environment."""
        root = parser.parse("\\begin{rows}{1}\\end{rows}")
        environment = root.value[0]

        assert environment.name == "rows"
        assert environment.value.parameters == []

    def test_empty_environment(self, parser):
        """Test that an environment can be empty."""
        root = parser.parse("\\begin{itemize}\\end{itemize}")
        environment = root.value[0]

        assert environment.name == "itemize"
        assert environment.value.content.type == ASTNodeType.LATEX
        assert environment.value.content.value == []
        assert range_offsets(environment.value.content) == (15, 15)
        assert environment.value.end.type == ASTNodeType.COMMAND
        assert environment.value.end.name == "end"
        assert range_offsets(environment.value.end) == (15, 28)
        assert range_offsets(environment) == (0, 28)

    def test_nested_environments(self, parser):
        """Test environments nested in each other."""
        text = (
            "\\begin{gridlayout}[0.5]\n"
            "\\begin{row}{1}\\begin{cell}{2}A\\end{cell}\\end{row}\n"
            "\\end{gridlayout}"
        )
        root = parser.parse(text)
        environments = nodes_of_type(root, ASTNodeType.ENVIRONMENT)

        assert [environment.name for environment in environments] == ["gridlayout", "row", "cell"]
        assert environments[0].value.parameters[0][0].value.value == "0.5"
        assert environments[1].value.parameters[0][0].value.value == "1"
        assert environments[2].value.parameters[0][0].value.value == "2"
        assert environments[1].range.from_.line == 1
        assert environments[0].range.to.line == 2

    def test_optional_environment_parameter(self, parser):
        """Test a known environment without its optional parameter."""
        root = parser.parse("\\begin{gridlayout}\\end{gridlayout}")

        assert root.value[0].value.parameters == [[]]

    def test_mismatched_end_fails(self, parser):
        """Test that an environment must end with its own name."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("\\begin{foo}X\\end{bar}")

        assert exc_info.value.position.offset == 17
        assert "'foo'" in exc_info.value.expected

    def test_unclosed_environment_fails(self, parser):
        """Test that an environment must be closed."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("\\begin{foo}X")

        assert exc_info.value.position.offset == 12

    def test_stray_end_fails(self, parser):
        """Test that an end command cannot be parsed on its own."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("\\end{foo}")

        assert exc_info.value.position.offset == 0
        assert "\\<any command> (unexpected \\end)" in exc_info.value.expected

    def test_end_is_read_by_its_environment(self, parser):
        """Test that the end command of an environment is the node held by the environment."""
        root = parser.parse("\\begin{itemize}\\end{itemize}")
        environment = root.value[0]
        commands = nodes_of_type(root, ASTNodeType.COMMAND)

        assert [command.name for command in commands] == ["begin", "end"]
        assert commands[1] is environment.value.end


class TestParseFailures:
    """Test documents that do not match the grammar."""

    def test_empty_document(self, parser):
        """Test that an empty document does not parse."""
        with pytest.raises(LatexParseError):
            parser.parse("")

    def test_unclosed_block(self, parser):
        """Test that the error reports the furthest position reached."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("{abc")

        error = exc_info.value
        assert error.position.offset == 4
        assert error.position.line == 1
        assert error.position.column == 5
        assert "'}'" in error.expected
        assert error.error_details['offset'] == 4

    def test_unexpected_closing_brace(self, parser):
        """Test that a closing brace without opening brace does not parse."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("abc}")

        assert exc_info.value.position.offset == 3
        assert "EOF" in exc_info.value.expected

    def test_failure_on_later_line(self, parser):
        """Test that the position of an error is given with 1-based lines and columns."""
        with pytest.raises(LatexParseError) as exc_info:
            parser.parse("abc\n  {x")

        assert exc_info.value.position.line == 2
        assert exc_info.value.position.column == 5

    def test_parse_latex_function(self):
        """Test the convenience parsing function."""
        root = parse_latex("abc")

        assert root.value[0].value == "abc"


class TestNestingDepth:
    """Test the limit on how deeply blocks and environments can nest."""

    def test_nesting_within_limit(self):
        """Test that blocks nested up to the limit parse."""
        root = LatexParser(max_depth=2).parse("{{x}}")

        assert root.value[0].value.value[0].type == ASTNodeType.BLOCK

    def test_nesting_past_limit(self):
        """Test that one level past the limit is reported where it starts."""
        with pytest.raises(LatexParseError) as exc_info:
            LatexParser(max_depth=2).parse("{{{x}}}")

        assert exc_info.value.position.offset == 3
        assert exc_info.value.position.column == 4
        assert "nesting depth of at most 2" in exc_info.value.expected

    def test_default_limit_allows_reasonable_nesting(self, parser):
        """Test that fifty nested blocks parse with the default limit."""
        root = parser.parse("{" * 50 + "x" + "}" * 50)

        assert len(root.value) == 1

    def test_deeply_nested_blocks(self, parser):
        """Test that hundreds of nested blocks give a parse error."""
        with pytest.raises(LatexParseError):
            parser.parse("{" * 400 + "x" + "}" * 400)

    def test_deeply_nested_environments(self, parser):
        """Test that hundreds of nested lists give a parse error."""
        text = "\\begin{itemize}" * 200 + "x" + "\\end{itemize}" * 200

        with pytest.raises(LatexParseError) as exc_info:
            parser.parse(text)

        assert "nesting depth of at most 100" in exc_info.value.expected

    def test_parser_reusable_after_depth_error(self):
        """Test that a depth error does not leak into the next parse."""
        parser = LatexParser(max_depth=1)
        with pytest.raises(LatexParseError):
            parser.parse("{{x}}")

        assert parser.parse("{x}").value[0].type == ASTNodeType.BLOCK

    def test_parse_latex_max_depth(self):
        """Test passing a limit to the convenience parsing function."""
        with pytest.raises(LatexParseError):
            parse_latex("{{x}}", max_depth=1)

        assert parse_latex("{x}", max_depth=1).value[0].type == ASTNodeType.BLOCK


DOCUMENT = (
    "\\documentclass{article}\n"
    "% Preamble\n"
    "\\begin{document}\n"
    "Some text with $x_1$ and $$\\frac{a}{b}$$ & more_stuff.\n"
    "\\includegraphics[width=3cm, draft]{cat.png}\\\\[1em]\n"
    "\\begin{tabular}{cc}\n"
    "a & b \\\\\n"
    "\\end{tabular}\n"
    "\\begin{itemize}\\item One \\item{Two}\\end{itemize}\n"
    "\\end{document}\n"
)


class TestParsedTreeProperties:
    """Test properties holding for every parsed tree."""

    def test_parameter_slots_have_zero_or_one_element(self, parser):
        """Test the shape of the parameter slots of commands and environments."""
        root = parser.parse(DOCUMENT)

        for node in collect_nodes(root):
            if node.type in (ASTNodeType.COMMAND, ASTNodeType.ENVIRONMENT):
                for slot in node.value.parameters:
                    assert isinstance(slot, list)
                    assert len(slot) in (0, 1)

    def test_positions_round_trip_to_parser_indices(self, parser):
        """Test that node positions convert back to the parser indices they came from."""
        root = parser.parse(DOCUMENT)
        indexer = ParserIndexer(DOCUMENT)

        for node in collect_nodes(root):
            for position in (node.range.from_, node.range.to):
                assert position.as_parser_index == indexer.index_at(position.offset)

    def test_node_ids_are_unique(self, parser):
        """Test that each node has its own identifier."""
        nodes = collect_nodes(parser.parse(DOCUMENT))
        node_ids = [node.node_id for node in nodes]

        assert len(set(node_ids)) == len(node_ids)

    def test_node_ids_are_deterministic(self, parser):
        """Test that parsing the same document twice gives the same identifiers."""
        first = [node.node_id for node in collect_nodes(parser.parse(DOCUMENT))]
        second = [node.node_id for node in collect_nodes(parser.parse(DOCUMENT))]

        assert first == second

    def test_shared_id_generator(self):
        """Test that a shared generator keeps handing out new identifiers."""
        generator = ASTNodeIdGenerator()
        parser = LatexParser(id_generator=generator)
        first = collect_nodes(parser.parse("a"))
        second = collect_nodes(parser.parse("b"))

        assert not {node.node_id for node in first} & {node.node_id for node in second}
        assert generator.next_id > 0

    def test_node_text_matches_range(self, parser):
        """Test that the range of each leaf covers its text."""
        root = parser.parse(DOCUMENT)

        for node in nodes_of_type(root, ASTNodeType.TEXT):
            start, end = range_offsets(node)
            assert DOCUMENT[start:end] == node.value
