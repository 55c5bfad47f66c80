"""
Incremental LaTeX AST.

This package parses a simplified subset of LaTeX into an abstract syntax tree
and keeps the ranges of its nodes in sync with the edits of the source, without
parsing the document again after each edit.
"""

from ilatex.latex_ast import LatexAST
from ilatex.latex_ast_formatter import LatexASTFormatter
from ilatex.latex_ast_node import (
    EMPTY,
    AssignmentValue,
    ASTEmptyValue,
    ASTNode,
    ASTNodeType,
    CommandValue,
    EnvironmentValue,
)
from ilatex.latex_ast_node_collector import LatexASTNodeCollector
from ilatex.latex_ast_node_id_generator import ASTNodeIdGenerator
from ilatex.latex_ast_searcher import LatexASTSearcher
from ilatex.latex_ast_visitor import LatexASTVisitor, LatexASTVisitorAdapter
from ilatex.latex_exceptions import (
    LatexASTError,
    LatexGrammarConfigError,
    LatexParseError,
    NoASTRootError,
    UnreachableChangeRelationError,
    UnspecifiedOffsetError,
)
from ilatex.latex_grammar_config import (
    CommandSpecification,
    EnvironmentSpecification,
    LatexGrammarConfig,
    ParameterContent,
    ParameterDelimiter,
    ParameterSpecification,
)
from ilatex.latex_parser import LatexParser, parse_latex
from ilatex.latex_parser_index import ParserIndex, ParserIndexer
from ilatex.latex_source_buffer import LatexSourceBuffer, StringLatexSourceBuffer
from ilatex.latex_source_change import SourceFileChange, SourceFileChangeKind
from ilatex.latex_source_file import LatexSourceFile
from ilatex.latex_source_position import (
    PositionShift,
    RawSourceFilePosition,
    RawSourceFileRange,
    SourceFilePosition,
)
from ilatex.latex_source_range import RelativeRangePosition, SourceFileRange

__all__ = [
    # Exceptions
    'LatexASTError',
    'LatexParseError',
    'UnspecifiedOffsetError',
    'UnreachableChangeRelationError',
    'NoASTRootError',
    'LatexGrammarConfigError',
    # Positions, ranges and changes
    'ParserIndex',
    'ParserIndexer',
    'PositionShift',
    'RawSourceFilePosition',
    'RawSourceFileRange',
    'SourceFilePosition',
    'SourceFileRange',
    'RelativeRangePosition',
    'SourceFileChange',
    'SourceFileChangeKind',
    # Grammar
    'LatexGrammarConfig',
    'ParameterSpecification',
    'ParameterDelimiter',
    'ParameterContent',
    'CommandSpecification',
    'EnvironmentSpecification',
    'LatexParser',
    'parse_latex',
    # AST
    'ASTNode',
    'ASTNodeType',
    'ASTEmptyValue',
    'EMPTY',
    'CommandValue',
    'EnvironmentValue',
    'AssignmentValue',
    'ASTNodeIdGenerator',
    'LatexAST',
    # Visitors
    'LatexASTVisitor',
    'LatexASTVisitorAdapter',
    'LatexASTFormatter',
    'LatexASTNodeCollector',
    'LatexASTSearcher',
    # Source files
    'LatexSourceBuffer',
    'StringLatexSourceBuffer',
    'LatexSourceFile',
]
