"""Tokenizer turning one REPL input line into a tagged command."""

from dataclasses import dataclass
from typing import Dict, Union

from ..errors import CommandError
from ..export import ExportFormat, parse_format

SETTABLE_OPTIONS = ("row_limit", "column_limit")

# Meta-command name -> one-line usage, shown by :help and offered by completion
COMMAND_HELP: Dict[str, str] = {
    ":set": ":set row_limit|column_limit <n>   change display limits",
    ":list": ":list                             show the last select's first row vertically",
    ":all": ":all                              re-run the last select with up to 1000 rows",
    ":export": ":export csv|insert|excel <path|-> export the last select",
    ":describe": ":describe <name>                  describe a table, view, sequence or index",
    ":desc": ":desc <name>                      short for :describe",
    ":search": ":search <pattern>                 find catalog objects by name",
    ":tables": ":tables                           list tables",
    ":queries": ":queries                          list standard queries (run with @name)",
    ":help": ":help                             show this help",
}


@dataclass(frozen=True)
class SetOption:
    key: str
    value: int


@dataclass(frozen=True)
class ShowLast:
    pass


@dataclass(frozen=True)
class ShowAll:
    pass


@dataclass(frozen=True)
class Export:
    format: ExportFormat
    target: str


@dataclass(frozen=True)
class RunSaved:
    name: str


@dataclass(frozen=True)
class RunRaw:
    statement: str

    @property
    def is_select(self) -> bool:
        return self.statement.startswith("select")


@dataclass(frozen=True)
class Describe:
    name: str


@dataclass(frozen=True)
class Search:
    pattern: str


@dataclass(frozen=True)
class ListTables:
    pass


@dataclass(frozen=True)
class ListQueries:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Unknown:
    word: str


@dataclass(frozen=True)
class Empty:
    pass


Command = Union[
    SetOption, ShowLast, ShowAll, Export, RunSaved, RunRaw,
    Describe, Search, ListTables, ListQueries, Help, Unknown, Empty,
]


def clean_statement(line: str) -> str:
    """Strip whitespace and trailing semicolons from a raw statement."""
    return line.strip().rstrip(";").rstrip()


def _parse_set(args) -> SetOption:
    if len(args) != 2:
        raise CommandError("Usage: :set row_limit|column_limit <n>")
    key, value = args
    if key not in SETTABLE_OPTIONS:
        raise CommandError(
            f"Unknown option: {key}",
            details={"option": key, "supported": list(SETTABLE_OPTIONS)},
        )
    if not value.isdigit():
        raise CommandError(f"Invalid value for {key}: {value}", details={"option": key, "value": value})
    return SetOption(key=key, value=int(value))


def _parse_meta(line: str) -> Command:
    word, _, rest = line.partition(" ")
    rest = rest.strip()
    args = rest.split()

    if word == ":set":
        return _parse_set(args)
    if word == ":list":
        return ShowLast()
    if word == ":all":
        return ShowAll()
    if word == ":export":
        if len(args) != 2:
            raise CommandError("Usage: :export csv|insert|excel <path|->")
        return Export(format=parse_format(args[0]), target=args[1])
    if word in (":describe", ":desc"):
        if len(args) != 1:
            raise CommandError(f"Usage: {word} <name>")
        return Describe(name=args[0])
    if word == ":search":
        if not rest:
            raise CommandError("Usage: :search <pattern>")
        return Search(pattern=rest)
    if word == ":tables":
        return ListTables()
    if word == ":queries":
        return ListQueries()
    if word == ":help":
        return Help()
    return Unknown(word=word)


def parse_command(line: str) -> Command:
    """Classify one input line.

    Raises:
        CommandError: for a malformed meta-command
        ExportError: for an unsupported export format
    """
    line = line.strip()
    if not line:
        return Empty()
    if line.startswith(":"):
        return _parse_meta(line)
    if line.startswith("@"):
        return RunSaved(name=clean_statement(line[1:]))

    statement = clean_statement(line)
    if not statement:
        return Empty()
    return RunRaw(statement=statement)
