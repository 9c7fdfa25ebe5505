"""
Interactive read-parse-print loop for the Monkey language.

Each line is lexed and parsed on its own. In ``parse`` mode the reconstructed
program text is printed back; in ``tokens`` mode every token of the line is
printed instead. Parser diagnostics are reported and the line is skipped.
"""

import logging
from typing import TextIO

from monkey.monkey_lexer import Lexer, tokenize
from monkey.monkey_parser import Parser

logger = logging.getLogger(__name__)

PROMPT = ">> "
MODES = ("parse", "tokens")

MONKEY_FACE = r'''            __,__
   .--.  .-"     "-.  .--.
  / .. \/  .-. .-.  \/ .. \
 | |  '|  /   Y   \  |'  | |
 | \   \  \ 0 | 0 /  /   / |
  \ '- ,\.-"""""""-./, -' /
   ''-' /_   ^ ^   _\ '-''
       |  \._   _./  |
       \   \ '~' /   /
        '._ '-=-' _.'
           '-----'
'''


def print_parser_errors(errors: list[str], out: TextIO | None = None) -> None:
    print(MONKEY_FACE, end="", file=out)
    print("Woops! We ran into some monkey business here!", file=out)
    print(" parser errors:", file=out)
    for msg in errors:
        print(f"\t{msg}", file=out)


def print_tokens(src: str) -> None:
    """Prints every token of `src` except the closing EOF."""
    for tok in tokenize(src)[:-1]:
        print(f"{tok.type.name:<10} {tok.literal!r}")


def print_program(src: str) -> bool:
    """Parses one chunk of source and prints the program or its diagnostics.

    Returns:
        bool: True if the chunk parsed without diagnostics.
    """
    parser = Parser(Lexer(src))
    program = parser.parse_program()
    if parser.errors:
        logger.debug("%d diagnostic(s) for %r", len(parser.errors), src)
        print_parser_errors(parser.errors)
        return False
    print(program)
    return True


def start_repl(mode: str = "parse") -> None:
    if mode not in MODES:
        raise ValueError(f"Unknown REPL mode: {mode!r} (expected one of {MODES})")

    print(f"Monkey REPL [mode={mode}]. Type 'exit' or 'quit' to leave.")

    while True:
        try:
            line = input(PROMPT)
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Monkey REPL.")
            return

        src = line.strip()
        if src in ("exit", "quit"):
            print("Exiting Monkey REPL.")
            return
        if not src:
            continue
        if src in (":tokens", ":parse"):
            mode = src[1:]
            print(f"[mode] >>> {mode}")
            continue

        if mode == "tokens":
            print_tokens(src)
        else:
            print_program(src)


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
