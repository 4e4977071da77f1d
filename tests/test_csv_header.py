import pytest

from csv_header import HeaderError, parse_header, parse_value_type
from pprof_model import ValueType


@pytest.mark.parametrize(
    'label,expected',
    [
        ('samples', ValueType('samples', 'count')),
        ('time/ms', ValueType('time', 'ms')),
        ('samples/unit1/unit2', ValueType('samples/unit1', 'unit2')),
        ('a/b/c/d', ValueType('a/b/c', 'd')),
        ('time/', ValueType('time', '')),
        ('Stack', ValueType('Stack', 'count')),
    ]
)
def test_parse_value_type(label, expected):
    assert parse_value_type(label) == expected


@pytest.mark.parametrize(
    'row,stack_index,columns',
    [
        (['stack', 'time/ms'], 0, [(1, ValueType('time', 'ms'))]),
        (['time/ms', 'stack'], 1, [(0, ValueType('time', 'ms'))]),
        (['time/seconds', 'stack', 'age/years'], 1,
         [(0, ValueType('time', 'seconds')), (2, ValueType('age', 'years'))]),
    ]
)
def test_stack_column_position(row, stack_index, columns):
    plan = parse_header(row)
    assert plan.stack_index == stack_index
    assert plan.width == len(row)
    assert list(plan.value_columns) == columns
    assert plan.sample_types == [vt for _, vt in columns]


def test_duplicate_weight_labels_are_kept():
    plan = parse_header(['stack', 'samples', 'samples'])
    assert plan.sample_types == [ValueType('samples', 'count')] * 2


@pytest.mark.parametrize(
    'row,message',
    [
        (['samples/count'], 'expected "stack" in CSV header row, got: ["samples/count"]'),
        (['stack', 'stack', 'time/ms'],
         'expected "stack" in CSV header row, got: ["stack" "stack" "time/ms"]'),
        (['STACK', 'time/ms'], 'expected "stack" in CSV header row, got: ["STACK" "time/ms"]'),
        (['stack'], 'expected columns with weights in CSV header row, got ["stack"]'),
    ]
)
def test_header_errors(row, message):
    with pytest.raises(HeaderError) as excinfo:
        parse_header(row)
    assert str(excinfo.value) == message
