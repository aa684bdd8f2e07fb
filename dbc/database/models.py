"""Backend-independent result and catalog models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


Cell = Optional[str]


@dataclass(frozen=True)
class Column:
    """A result column."""
    name: str


@dataclass(frozen=True)
class Row:
    """One result row; ``None`` cells are SQL NULL."""
    data: List[Cell]

    def __len__(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class QueryResult:
    """Columns and fully materialized rows of a query."""
    columns: List[Column] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    def __post_init__(self):
        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row.data) != width:
                raise ValueError(
                    f"Row {index} has {len(row.data)} cells, expected {width}"
                )

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @classmethod
    def from_values(cls, column_names: List[str], rows: List[List[Cell]]) -> "QueryResult":
        """Build a result from plain names and cell lists."""
        return cls(
            columns=[Column(name=n) for n in column_names],
            rows=[Row(data=list(r)) for r in rows],
        )


@dataclass(frozen=True)
class TableRef:
    """A table found by schema introspection."""
    schema: str
    name: str


@dataclass(frozen=True)
class StandardQuery:
    """A named diagnostic query shipped with an adapter."""
    name: str
    query: str


class ObjectKind(str, Enum):
    """Kinds of catalog objects ``describe`` can resolve."""
    TABLE = "table"
    VIEW = "view"
    SEQUENCE = "sequence"
    INDEX = "index"
    MATERIALIZED_VIEW = "materialized view"
    UNKNOWN = "unknown object"


@dataclass(frozen=True)
class ColumnInfo:
    """Column metadata for a described table."""
    name: str
    data_type: str
    length: Optional[str] = None
    precision: Optional[str] = None
    nullable: Optional[str] = None
    default: Optional[str] = None


@dataclass(frozen=True)
class ForeignKey:
    """Foreign key from a described table to another table."""
    column: str
    foreign_schema: str
    foreign_table: str
    foreign_column: str


@dataclass(frozen=True)
class SequenceInfo:
    """Sequence metadata; fields a catalog does not record stay None."""
    name: str
    start_value: Optional[str] = None
    min_value: Optional[str] = None
    max_value: Optional[str] = None
    increment_by: Optional[str] = None
    last_value: Optional[str] = None


@dataclass
class ObjectDescription:
    """Result of ``Connection.describe``."""
    name: str
    kind: ObjectKind
    native_kind: Optional[str] = None
    columns: List[ColumnInfo] = field(default_factory=list)
    foreign_keys: List[ForeignKey] = field(default_factory=list)
    sequence: Optional[SequenceInfo] = None


@dataclass(frozen=True)
class CatalogObject:
    """One hit of ``Connection.search``."""
    name: str
    kind: str
