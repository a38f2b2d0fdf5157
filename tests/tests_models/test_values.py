"""
===============================================
Comprehensive pytest suite for models/values.py
===============================================

Sections:
---------
1. Unit tests - Constructors and payload validation
2. Edge case tests - bool/int distinction, timezone tagging, nesting

Available markers:
------------------
unit, edge_case

How to Execute:
---------------
All tests:          pytest tests/tests_models/test_values.py -v
By category:        pytest tests/tests_models/test_values.py -m unit
"""

import datetime
from decimal import Decimal

import pytest

from models.values import AirbyteValue, ValueType

# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_scalar_constructors_set_tag():
    """Each scalar constructor tags its payload."""
    assert AirbyteValue.null().type is ValueType.NULL
    assert AirbyteValue.boolean(True).type is ValueType.BOOLEAN
    assert AirbyteValue.integer(42).type is ValueType.INTEGER
    assert AirbyteValue.number(Decimal('1.5')).type is ValueType.NUMBER
    assert AirbyteValue.string('a').type is ValueType.STRING
    assert AirbyteValue.date(datetime.date(2024, 1, 1)).type is ValueType.DATE


@pytest.mark.unit
def test_is_null():
    assert AirbyteValue.null().is_null
    assert not AirbyteValue.integer(0).is_null


@pytest.mark.unit
def test_payload_mismatch_raises_type_error():
    """A payload that does not match the tag is rejected."""
    with pytest.raises(TypeError):
        AirbyteValue(ValueType.INTEGER, 'forty-two')

    with pytest.raises(TypeError):
        AirbyteValue(ValueType.STRING, 42)


@pytest.mark.unit
def test_tag_must_be_value_type():
    with pytest.raises(TypeError):
        AirbyteValue('integer', 1)


@pytest.mark.unit
def test_from_python_infers_tags():
    """from_python picks the variant from the Python type."""
    assert AirbyteValue.from_python(None) == AirbyteValue.null()
    assert AirbyteValue.from_python(7) == AirbyteValue.integer(7)
    assert AirbyteValue.from_python(1.25) == AirbyteValue.number(1.25)
    assert AirbyteValue.from_python('x') == AirbyteValue.string('x')


@pytest.mark.unit
def test_from_python_returns_airbyte_value_unchanged():
    value = AirbyteValue.string('kept')
    assert AirbyteValue.from_python(value) is value


@pytest.mark.unit
def test_to_python_unwraps_nested_structures():
    """to_python recursively unwraps OBJECT and ARRAY."""
    value = AirbyteValue.from_python({'a': [1, 'two', None], 'b': {'c': True}})

    assert value.type is ValueType.OBJECT
    assert value.value['a'].type is ValueType.ARRAY
    assert value.to_python() == {'a': [1, 'two', None], 'b': {'c': True}}


# ====================
# 2. EDGE CASE TESTS
# ====================

@pytest.mark.edge_case
def test_bool_is_not_integer():
    """bool is an int subclass but must never be tagged INTEGER."""
    assert AirbyteValue.from_python(True).type is ValueType.BOOLEAN

    with pytest.raises(TypeError):
        AirbyteValue.integer(True)

    with pytest.raises(TypeError):
        AirbyteValue.number(False)


@pytest.mark.edge_case
def test_timestamp_tag_follows_timezone_awareness():
    aware = datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    naive = datetime.datetime(2024, 1, 1, 12, 0)

    assert AirbyteValue.timestamp(aware).type is ValueType.TIMESTAMP_WITH_TIMEZONE
    assert AirbyteValue.timestamp(naive).type is ValueType.TIMESTAMP_WITHOUT_TIMEZONE
    assert AirbyteValue.from_python(aware).type is ValueType.TIMESTAMP_WITH_TIMEZONE


@pytest.mark.edge_case
def test_time_tag_follows_timezone_awareness():
    assert AirbyteValue.time(datetime.time(8, 30)).type is ValueType.TIME_WITHOUT_TIMEZONE
    assert AirbyteValue.time(
        datetime.time(8, 30, tzinfo=datetime.timezone.utc)
    ).type is ValueType.TIME_WITH_TIMEZONE


@pytest.mark.edge_case
def test_datetime_is_not_a_date_payload():
    """datetime subclasses date; DATE only accepts a pure date."""
    with pytest.raises(TypeError):
        AirbyteValue(ValueType.DATE, datetime.datetime(2024, 1, 1))

    assert AirbyteValue.from_python(datetime.date(2024, 1, 1)).type is ValueType.DATE


@pytest.mark.edge_case
def test_object_requires_airbyte_values():
    with pytest.raises(TypeError):
        AirbyteValue(ValueType.OBJECT, {'a': 1})


@pytest.mark.edge_case
def test_unsupported_python_type_raises():
    with pytest.raises(TypeError):
        AirbyteValue.from_python(object())
