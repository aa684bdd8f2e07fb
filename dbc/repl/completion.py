"""Tab completion for the REPL."""

from typing import Iterable, List

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .commands import COMMAND_HELP

SQL_KEYWORDS = [
    "select", "from", "where", "insert", "into", "values", "update", "set",
    "delete", "create", "alter", "drop", "table", "view", "index", "join",
    "inner", "left", "right", "outer", "on", "and", "or", "not", "null",
    "order", "by", "group", "having", "union", "distinct", "limit", "as",
    "count", "exists", "between", "like", "in", "is",
]


class DbcCompleter(Completer):
    """Completes the word before the cursor.

    ``@name`` completes standard queries, ``:name`` meta-commands, and
    any other word table names and SQL keywords.
    """

    def __init__(self, table_names: Iterable[str], query_names: Iterable[str]):
        self.table_names = sorted(set(table_names))
        self.query_names = list(query_names)

    def candidates(self, word: str) -> List[str]:
        if word.startswith("@"):
            return ["@" + name for name in self.query_names if name.startswith(word[1:])]
        if word.startswith(":"):
            return [name for name in COMMAND_HELP if name.startswith(word)]

        lowered = word.lower()
        tables = [t for t in self.table_names if t.startswith(lowered)]
        keywords = [k for k in SQL_KEYWORDS if k.startswith(lowered) and k not in tables]
        return tables + keywords

    def get_completions(self, document: Document, complete_event):
        word = document.get_word_before_cursor(WORD=True)
        if not word:
            return
        for candidate in self.candidates(word):
            yield Completion(candidate, start_position=-len(word))
