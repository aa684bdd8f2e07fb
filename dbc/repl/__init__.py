"""Interactive session: command parsing, dispatch and the prompt loop."""

from .session import SessionOptions, SessionState
from .commands import parse_command
from .dispatcher import Dispatcher
from .completion import DbcCompleter
from .shell import run_shell

__all__ = [
    "SessionOptions",
    "SessionState",
    "parse_command",
    "Dispatcher",
    "DbcCompleter",
    "run_shell",
]
