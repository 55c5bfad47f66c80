"""
Nodes of the LaTeX abstract syntax tree.

Every node has a type, a name, a value and the range of the source text it was
parsed from. The shape of the value depends on the type of the node, and the
children of a node are derived from its value.
"""

from dataclasses import dataclass
from enum import Enum
import sys
from typing import TYPE_CHECKING, Any, Callable, List

from ilatex.latex_source_change import SourceFileChange
from ilatex.latex_source_range import RelativeRangePosition, SourceFileRange

if TYPE_CHECKING:
    from ilatex.latex_ast_visitor import LatexASTVisitor
    from ilatex.latex_source_buffer import LatexSourceBuffer


class ASTNodeType(Enum):
    """Kinds of AST nodes."""
    LATEX = "Latex"
    TEXT = "Text"
    WHITESPACE = "Whitespace"
    ENVIRONMENT = "Environment"
    COMMAND = "Command"
    MATH = "Math"
    INLINE_MATH_BLOCK = "InlineMathBlock"
    MATH_BLOCK = "MathBlock"
    BLOCK = "Block"
    CURLY_BRACES_PARAMETER_BLOCK = "CurlyBracesParameterBlock"
    PARAMETER = "Parameter"
    SQUARE_BRACES_PARAMETER_BLOCK = "SquareBracesParameterBlock"
    PARAMETER_KEY = "ParameterKey"
    PARAMETER_VALUE = "ParameterValue"
    PARAMETER_ASSIGNMENT = "ParameterAssignment"
    PARAMETER_LIST = "ParameterList"
    SPECIAL_SYMBOL = "SpecialSymbol"
    COMMENT = "Comment"


class ASTEmptyValue(Enum):
    """Marker for a node that wraps nothing (e.g. "{}")."""
    EMPTY = "Empty"


EMPTY = ASTEmptyValue.EMPTY


@dataclass
class CommandValue:
    """
    Value of a command node.

    Each entry of `parameters` is one declared parameter slot: an empty list when
    an optional parameter is absent, otherwise a list holding the parameter block.
    """
    name: str
    name_range: SourceFileRange
    parameters: List[List['ASTNode']]


@dataclass
class EnvironmentValue:
    """Value of an environment node."""
    begin: 'ASTNode'
    parameters: List[List['ASTNode']]
    content: 'ASTNode'
    end: 'ASTNode'


@dataclass
class AssignmentValue:
    """Value of a "key = value" parameter node."""
    key: 'ASTNode'
    value: 'ASTNode'


EditListener = Callable[[SourceFileChange], None]


class ASTNode:
    """A node of the LaTeX AST."""

    def __init__(
        self,
        node_type: ASTNodeType,
        name: str,
        value: Any,
        node_range: SourceFileRange,
        node_id: int = 0
    ) -> None:
        """
        Initialize a node.

        Args:
            node_type: Kind of the node
            name: Name of the node (e.g. a command name), or an empty string
            value: Type-dependent value of the node
            node_range: Range of the source text the node was parsed from
            node_id: Identifier of the node, unique within a parse
        """
        self._type = node_type
        self._name = name
        self._value = value
        self._range = node_range
        self._node_id = node_id

        self._edited_within_range = False
        self._edited_across_range = False

        self._before_edit_listeners: List[EditListener] = []
        self._within_edit_listeners: List[EditListener] = []
        self._across_edit_listeners: List[EditListener] = []

    @property
    def type(self) -> ASTNodeType:
        """Kind of the node."""
        return self._type

    @property
    def name(self) -> str:
        """Name of the node."""
        return self._name

    @property
    def value(self) -> Any:
        """Type-dependent value of the node."""
        return self._value

    @property
    def range(self) -> SourceFileRange:
        """Range of the node in the source file."""
        return self._range

    @property
    def node_id(self) -> int:
        """Identifier of the node."""
        return self._node_id

    @property
    def edited_within_range(self) -> bool:
        """True once a change has happened strictly within the range of this node."""
        return self._edited_within_range

    @property
    def edited_across_range(self) -> bool:
        """True once a change has overlapped a bound of this node's range."""
        return self._edited_across_range

    @property
    def has_been_edited_by_user(self) -> bool:
        """True if the text of this node may have been modified since it was parsed."""
        return self._edited_within_range or self._edited_across_range

    def on_before_edit(self, listener: EditListener) -> None:
        """Register a callback invoked when a change happens before this node."""
        self._before_edit_listeners.append(listener)

    def on_within_edit(self, listener: EditListener) -> None:
        """Register a callback invoked when a change happens within this node."""
        self._within_edit_listeners.append(listener)

    def on_across_edit(self, listener: EditListener) -> None:
        """Register a callback invoked when a change overlaps a bound of this node."""
        self._across_edit_listeners.append(listener)

    def process_source_file_edit(self, change: SourceFileChange) -> RelativeRangePosition:
        """
        Update the range and edit state of this node after a change in the source file.

        Args:
            change: The change that was made to the source file

        Returns:
            The position of the change relative to this node

        Raises:
            UnreachableChangeRelationError: If the change cannot be related to this node
        """
        relative_position = self._range.process_change(change)
        if self._type == ASTNodeType.COMMAND:
            self._value.name_range.process_change(change)

        listeners: List[EditListener] = []
        if relative_position == RelativeRangePosition.BEFORE:
            listeners = self._before_edit_listeners

        elif relative_position == RelativeRangePosition.WITHIN:
            self._edited_within_range = True
            listeners = self._within_edit_listeners

        elif relative_position == RelativeRangePosition.ACROSS:
            self._edited_across_range = True
            listeners = self._across_edit_listeners

        for listener in list(listeners):
            listener(change)

        return relative_position

    def children(self) -> List['ASTNode']:
        """
        Get the direct children of this node, in source order.

        Returns:
            List of child nodes (empty for leaves)
        """
        node_type = self._type
        value = self._value

        if node_type == ASTNodeType.COMMAND:
            return [node for parameter in value.parameters for node in parameter]

        if node_type == ASTNodeType.ENVIRONMENT:
            parameters = [node for parameter in value.parameters for node in parameter]
            return [value.begin, *parameters, value.content, value.end]

        if node_type in (
            ASTNodeType.BLOCK,
            ASTNodeType.INLINE_MATH_BLOCK,
            ASTNodeType.MATH_BLOCK,
            ASTNodeType.CURLY_BRACES_PARAMETER_BLOCK,
            ASTNodeType.SQUARE_BRACES_PARAMETER_BLOCK
        ):
            return [] if value is EMPTY else [value]

        if node_type in (ASTNodeType.LATEX, ASTNodeType.PARAMETER_LIST):
            return list(value)

        if node_type == ASTNodeType.PARAMETER_ASSIGNMENT:
            return [value.key, value.value]

        if node_type == ASTNodeType.MATH:
            # Only comments are nodes: the rest of the math content is plain text
            return [fragment for fragment in value if isinstance(fragment, ASTNode)]

        return []

    def visit_with(self, visitor: 'LatexASTVisitor', depth: int = 0, max_depth: int = sys.maxsize) -> None:
        """
        Visit this node and its descendants in pre-order.

        Args:
            visitor: Visitor called on every node
            depth: Depth of this node
            max_depth: Maximum depth of the visited nodes
        """
        visitor.visit(self, depth)

        if depth + 1 > max_depth:
            return

        for child in self.children():
            child.visit_with(visitor, depth + 1, max_depth)

    def get_content_in(self, buffer: 'LatexSourceBuffer') -> str:
        """
        Get the current text of this node in a source buffer.

        Args:
            buffer: Buffer holding the source text

        Returns:
            The text covered by the current range of this node
        """
        return buffer.get_text_in_range(self._range)

    def __str__(self) -> str:
        return f"{self._type.value} [{self._name}] {self._range}"

    def __repr__(self) -> str:
        return f"ASTNode(type={self._type.value}, name={self._name!r}, id={self._node_id}, range={self._range})"
