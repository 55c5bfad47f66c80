"""Command-line tool printing the AST of a LaTeX document."""

import argparse
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import List

from ilatex.latex_ast import LatexAST
from ilatex.latex_ast_formatter import LatexASTFormatter
from ilatex.latex_exceptions import LatexGrammarConfigError, LatexParseError
from ilatex.latex_grammar_config import LatexGrammarConfig


def setup_logging(log_file: str | None, verbose: bool) -> None:
    """
    Configure logging to stderr or to a rotating log file.

    Args:
        log_file: Path of the log file, or None to log to stderr
        verbose: Log debug messages if True, only warnings otherwise
    """
    handlers: List[logging.Handler] = []
    if log_file is not None:
        # Keep up to 5 log files, max 1MB each
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=1024*1024,
            backupCount=4,
            encoding='utf-8'
        ))

    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def main(argv: List[str] | None = None) -> int:
    """
    Main entry point for the LaTeX AST printer.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(
        prog='ilatex',
        description='Parse a LaTeX document and print its AST',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the AST of a file
  python -m ilatex paper.tex

  # Print the top two levels of the AST of a document read from stdin
  echo "\\includegraphics[width=3cm]{cat.png}" | python -m ilatex - --max-depth 2
"""
    )
    parser.add_argument(
        'input',
        help='Input file (use "-" for stdin)'
    )
    parser.add_argument(
        '--max-depth',
        type=int,
        default=sys.maxsize,
        help='Maximum depth of the printed nodes (default: no limit)'
    )
    parser.add_argument(
        '--config',
        help='JSON file listing the known commands and environments'
    )
    parser.add_argument(
        '--log-file',
        help='Write logs to this file instead of stderr'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log debug messages'
    )
    args = parser.parse_args(argv)

    setup_logging(args.log_file, args.verbose)

    if args.input == '-':
        source = sys.stdin.read()

    else:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Error: File not found: {args.input}", file=sys.stderr)
            return 1

        source = input_path.read_text(encoding='utf-8')

    config = None
    if args.config:
        try:
            config = LatexGrammarConfig.load(args.config)

        except (OSError, json.JSONDecodeError, LatexGrammarConfigError) as e:
            print(f"Error: Cannot load configuration {args.config}: {e}", file=sys.stderr)
            return 1

    ast = LatexAST(config)
    try:
        ast.parse(source)

    except LatexParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    formatter = LatexASTFormatter()
    ast.visit_with(formatter, args.max_depth)
    print(formatter.formatted_ast)
    return 0


if __name__ == '__main__':
    sys.exit(main())
