import os
from typing import Any

import pytest

from monkey.monkey_ast import Program
from monkey.monkey_lexer import Lexer
from monkey.monkey_parser import Parser

# Start coverage in subprocesses spawned by the CLI tests
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()


def parse_ok(source: str) -> Program:
    """Parse `source` and fail the test if any diagnostic was recorded."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    if parser.errors:
        pytest.fail("parser had errors:\n" + "\n".join(parser.errors))
    return program


@pytest.fixture  # type: ignore[misc]
def parse_clean() -> Any:
    return parse_ok
