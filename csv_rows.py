"""
Row translation: decode every data record into a pprof sample.

Records come from read_records() as (line, fields) pairs. Each record's
stack cell is split into frames, frames are deduplicated into shared
function/location entries, and each weight cell becomes one int64 value.
"""

import csv
import re
import sys

from pprof_model import ConversionError, Function, Location, Profile, Sample

FRAME_SEPARATOR = ";"

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

# Base-10 integer: optional sign, ASCII digits, nothing else
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def raise_field_size_limit():
    """Lift the csv module's per-field size cap so deep stacks fit in one cell."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            limit //= 2


class CSVReadError(ConversionError):
    def __init__(self, line, reason):
        super().__init__(f"error reading CSV: record on line {line}: {reason}")
        self.line = line
        self.reason = reason


class RowShapeError(CSVReadError):
    def __init__(self, line):
        super().__init__(line, "wrong number of fields")


class ValueParseError(ConversionError):
    def __init__(self, line, text, reason=None):
        message = f'on line {line}, couldn\'t parse number: "{text}"'
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.line = line
        self.text = text


def read_records(stream):
    """
    Yield (line, fields) for every non-blank CSV record in the stream.

    line is the 1-based line number the record starts on. The first record
    fixes the field count; a later record with another count raises
    RowShapeError.
    """
    raise_field_size_limit()
    reader = csv.reader(stream)
    width = None
    while True:
        start = reader.line_num + 1
        try:
            fields = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise CSVReadError(start, str(e)) from e

        if not fields:
            continue
        if width is None:
            width = len(fields)
        elif len(fields) != width:
            raise RowShapeError(start)
        yield start, fields


def split_stack(cell):
    """Frames of a stack cell in the order written; empty names are dropped."""
    return [frame for frame in cell.split(FRAME_SEPARATOR) if frame]


def parse_value(cell, line):
    """Parse a weight cell as a base-10 int64, raising ValueParseError otherwise."""
    if not _INTEGER_RE.fullmatch(cell):
        raise ValueParseError(line, cell)
    value = int(cell)
    if value < INT64_MIN or value > INT64_MAX:
        raise ValueParseError(line, cell, "value out of range")
    return value


class FrameTable:
    """
    Insert-or-get table from frame name to its Location.
    Ids start at 1 and follow first appearance; each location owns the
    function with the same id.
    """

    def __init__(self):
        self._by_name = {}
        self.functions = []
        self.locations = []

    def __len__(self):
        return len(self.locations)

    def __contains__(self, name):
        return name in self._by_name

    def location(self, name):
        loc = self._by_name.get(name)
        if loc is None:
            next_id = len(self.locations) + 1
            function = Function(id=next_id, name=name)
            loc = Location(id=next_id, function=function)
            self.functions.append(function)
            self.locations.append(loc)
            self._by_name[name] = loc
        return loc


def translate_row(plan, frames, line, fields):
    if len(fields) != plan.width:
        raise RowShapeError(line)

    locations = [frames.location(name) for name in split_stack(fields[plan.stack_index])]
    values = [parse_value(fields[index], line) for index, _ in plan.value_columns]
    return Sample(locations=locations, values=values)


def translate_rows(plan, records, comments=()):
    """
    Fold the data records into a Profile, one sample per record.
    The first bad record aborts the whole translation.
    """
    frames = FrameTable()
    samples = []
    for line, fields in records:
        samples.append(translate_row(plan, frames, line, fields))

    return Profile(
        sample_types=plan.sample_types,
        samples=samples,
        functions=frames.functions,
        locations=frames.locations,
        comments=list(comments),
    )
