"""Dataset mutation descriptions and data-shape conversion.

Two data shapes are accepted by the controller and they are not interchangeable:

- ``ViewController.change_data`` takes ROW records: a list of mappings, one per row.
- ``ViewController.load_data`` takes COLUMN data: a mapping of field name to an
  equal-length sequence of values (or a DataFrame-like object).
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

Row = Dict[str, Any]
RemovePredicate = Callable[[Row], bool]


def _remove_all(row: Row) -> bool:
    return True


@dataclass
class Changeset:
    """A (remove-predicate, insert-rows) pair applied to one dataset.

    Attributes:
        remove: Predicate selecting rows to delete; None removes nothing
        insert: Rows appended after removal, in order
    """

    remove: Optional[RemovePredicate] = None
    insert: List[Row] = field(default_factory=list)

    @classmethod
    def hard_reset(cls, rows: Iterable[Mapping[str, Any]]) -> "Changeset":
        """Replace every existing row with ``rows``."""
        return cls(remove=_remove_all, insert=[dict(row) for row in rows])

    @classmethod
    def append(cls, rows: Iterable[Mapping[str, Any]]) -> "Changeset":
        """Append ``rows`` without removing anything."""
        return cls(remove=None, insert=[dict(row) for row in rows])

    @property
    def removes_all(self) -> bool:
        return self.remove is _remove_all

    def apply(self, rows: Sequence[Row]) -> List[Row]:
        """Return the dataset that results from applying this changeset to ``rows``."""
        if self.remove is None:
            kept = list(rows)
        else:
            kept = [row for row in rows if not self.remove(row)]
        return kept + [dict(row) for row in self.insert]


def columns_to_records(columns: Any) -> List[Row]:
    """Convert column-oriented data into row records.

    Args:
        columns: Mapping of field name to a sequence of values, or an object
            with ``to_dict(orient="list")`` such as a pandas DataFrame

    Returns:
        List of row dictionaries, one per position in the columns

    Raises:
        ValueError: If the columns have different lengths
        TypeError: If ``columns`` is not column-oriented data

    Example:
        >>> columns_to_records({"x": [1, 2], "y": ["a", "b"]})
        [{'x': 1, 'y': 'a'}, {'x': 2, 'y': 'b'}]
    """
    if hasattr(columns, "to_dict") and not isinstance(columns, Mapping):
        columns = columns.to_dict(orient="list")

    if not isinstance(columns, Mapping):
        raise TypeError(
            f"Expected column-oriented data (mapping of field -> values), got {type(columns).__name__}"
        )

    names = list(columns.keys())
    if not names:
        return []

    lengths = {name: len(columns[name]) for name in names}
    if len(set(lengths.values())) > 1:
        raise ValueError(f"Columns have different lengths: {lengths}")

    n_rows = lengths[names[0]]
    return [{name: columns[name][i] for name in names} for i in range(n_rows)]
