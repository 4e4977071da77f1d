"""
Header interpretation: find the stack column and turn every other column
label into a pprof sample type.
"""

from dataclasses import dataclass

from pprof_model import ConversionError, ValueType

STACK_COLUMN = "stack"
UNIT_SEPARATOR = "/"
DEFAULT_UNIT = "count"


class HeaderError(ConversionError):
    pass


def format_row(row):
    """Render a row as ["a" "b"] for error messages."""
    return "[" + " ".join('"%s"' % label for label in row) + "]"


@dataclass(frozen=True)
class ColumnPlan:
    stack_index: int
    width: int
    value_columns: tuple

    @property
    def sample_types(self):
        return [vt for _, vt in self.value_columns]


def parse_value_type(label):
    """
    Split a column label into (type, unit).

    'samples' -> ('samples', 'count'), 'time/ms' -> ('time', 'ms').
    With several separators the last part is the unit and everything before
    it stays the type: 'samples/unit1/unit2' -> ('samples/unit1', 'unit2').
    """
    parts = label.split(UNIT_SEPARATOR)
    if len(parts) == 1:
        return ValueType(type=label, unit=DEFAULT_UNIT)
    return ValueType(type=UNIT_SEPARATOR.join(parts[:-1]), unit=parts[-1])


def parse_header(row):
    """
    Build the column plan from the header record.
    Raises HeaderError unless there is exactly one 'stack' column and at
    least one weight column.
    """
    row = list(row)
    stack_indices = [i for i, label in enumerate(row) if label == STACK_COLUMN]
    if len(stack_indices) != 1:
        raise HeaderError(f'expected "{STACK_COLUMN}" in CSV header row, got: {format_row(row)}')

    stack_index = stack_indices[0]
    value_columns = tuple(
        (i, parse_value_type(label)) for i, label in enumerate(row) if i != stack_index
    )
    if not value_columns:
        raise HeaderError(f"expected columns with weights in CSV header row, got {format_row(row)}")

    return ColumnPlan(stack_index=stack_index, width=len(row), value_columns=value_columns)
