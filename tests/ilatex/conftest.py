"""Shared fixtures for LaTeX AST tests."""

import pytest

from ilatex.latex_grammar_config import LatexGrammarConfig
from ilatex.latex_parser import LatexParser
from ilatex.latex_source_buffer import StringLatexSourceBuffer
from ilatex.latex_source_file import LatexSourceFile


@pytest.fixture
def config():
    """Default grammar configuration."""
    return LatexGrammarConfig.create_default()


@pytest.fixture
def parser(config):
    """Parser using the default grammar configuration."""
    return LatexParser(config)


@pytest.fixture
def source_file_factory(config):
    """Create source files backed by in-memory buffers."""
    source_files = []

    def create(text):
        source_file = LatexSourceFile(StringLatexSourceBuffer(text), config)
        source_files.append(source_file)
        return source_file

    yield create

    for source_file in source_files:
        source_file.close()
