"""
Monkey CLI Entrypoint.

This module provides the command-line interface for the Monkey front-end.
It lexes and parses source code and prints the result, or starts the REPL.

Features:
    - Read source from `.monkey` files or inline strings.
    - Print the reconstructed program, its AST as JSON, or the raw token stream.
    - Report parser diagnostics and exit non-zero when there are any.
    - Launch an interactive REPL.

Example usage:
    monkey hello.monkey
    monkey -s "let x = 5 * (2 + 3);"
    monkey -s "-a * b" --json
    monkey --repl --tokens

Functions:
    run_monkey(source: str, is_string: bool = False, tokens: bool = False,
               as_json: bool = False, pretty: bool = False) -> int:
        Runs the lex → parse → print pipeline and returns a process exit status.

    main() -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import sys

from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import Parser
from monkey.monkey_repl import print_parser_errors

logger = logging.getLogger(__name__)


def run_monkey(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    as_json: bool = False,
    pretty: bool = False,
) -> int:
    """
    Run the Monkey front-end: lex, parse, and print the result.

    Args:
        source (str): Monkey source code, or a path to a `.monkey` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        tokens (bool): If True, prints the token stream instead of parsing.
        as_json (bool): If True, prints the AST as JSON instead of source text.
        pretty (bool): If True, prints a banner around the output.

    Returns:
        int: 0 on success, 1 if the parser reported diagnostics.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.monkey'.
    """
    if not is_string and not source.endswith(".monkey"):
        raise ValueError("Only .monkey files are supported.")
    # 1. Read source
    if not is_string:
        logger.debug("reading %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    banner = "=" * 20

    # 2. Token dump only
    if tokens:
        if pretty:
            print(f"{banner}\nTokens\n{banner}")
        for tok in Lexer(source):
            print(f"{tok.line}:{tok.col}\t{tok.type.name}\t{tok.literal!r}")
        return 0

    # 3. Parsing
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    if parser.errors:
        print_parser_errors(parser.errors, out=sys.stderr)
        return 1

    # 4. Output result
    if as_json:
        output = json.dumps(program.to_dict(), indent=2)
    else:
        output = "\n".join(str(stmt) for stmt in program.statements)

    if pretty:
        print(f"{banner}\nProgram\n{banner}\n{output}\n{banner}")
    else:
        print(output)
    return 0


def main() -> None:
    """
    Entry point for the Monkey CLI.

    Launches the REPL if no arguments are passed or `--repl` is given, otherwise
    runs `run_monkey` and exits with its status.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print tokens instead of the parsed program (REPL: token mode).
        - `--json`: Print the AST as JSON.
        - `-p`, `--pretty`: Show banners around the output.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Enable debug logging on stderr.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from monkey.monkey_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="monkey")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token stream instead of the AST"
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Print the AST as JSON"
    )
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead of parsing"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    if args.repl or args.source is None:
        from monkey.monkey_repl import start_repl

        start_repl(mode="tokens" if args.tokens else "parse")
        return

    sys.exit(
        run_monkey(
            source=args.source,
            is_string=args.string,
            tokens=args.tokens,
            as_json=args.as_json,
            pretty=args.pretty,
        )
    )


if __name__ == "__main__":
    main()
