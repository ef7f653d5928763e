from typing import Annotated

import pytest

from marshalcat import (
    Error, MarshalError, OmitEmpty, Schema, dumps, encode, field, zero
)
from tests.hooks import Broken, Cents, Level, Plain


class Pair(Schema):
    A: Annotated[Cents, OmitEmpty()]
    B: str


class KeptPair(Schema):
    A: Cents
    B: str


def test_zero_field_is_omitted_with_omit_empty():
    assert Pair(A=Cents(), B="x").dumps() == '{"B":"x"}'


def test_non_zero_field_is_kept_with_omit_empty():
    assert Pair(A=Cents(150), B="x").dumps() == '{"A":"1.50","B":"x"}'


def test_zero_field_is_kept_without_omit_empty():
    assert KeptPair(A=Cents(), B="x").dumps() == '{"A":"0.00","B":"x"}'


def test_negative_amount_is_kept_with_omit_empty():
    assert dumps(Cents(-150)) == '"-1.50"'
    assert Pair(A=Cents(-5), B="x").dumps() == '{"A":"-0.05","B":"x"}'


class TestOutsideOfRecordFields:
    def test_top_level(self):
        assert dumps(Cents()) == '"0.00"'

    def test_top_level_encode_result_is_still_written(self):
        result = encode(Cents())
        assert result.data == '"0.00"'

    def test_array_elements(self):
        assert dumps([Cents(), Cents(5)]) == '["0.00","0.05"]'

    def test_tuple_elements(self):
        assert dumps((Cents(),)) == '["0.00"]'

    def test_mapping_values(self):
        assert dumps({"a": Cents()}) == '{"a":"0.00"}'

    def test_array_field_holding_zero_values(self):
        class Ledger(Schema):
            entries: Annotated[list, OmitEmpty()]

        assert Ledger(entries=[Cents()]).dumps() == '{"entries":["0.00"]}'


def test_zero_does_not_leak_out_of_nested_records():
    class Inner(Schema):
        amount: Annotated[Cents, OmitEmpty()]

    class Outer(Schema):
        inner: Annotated[Inner, OmitEmpty()]

    # the inner record is empty, but records are never zero themselves
    assert Outer(inner=Inner(amount=Cents())).dumps() == '{"inner":{}}'


@pytest.mark.parametrize("omit_empty", [True, False])
def test_failure_aborts_regardless_of_omit_empty(omit_empty):
    class Order(Schema):
        total = field(omit_empty=omit_empty)
        note: str

    with pytest.raises(MarshalError) as e:
        Order(total=Broken(), note="x").dumps()
    assert e.value.error == Error(msg="not today", field=("total",))
    assert str(e.value) == "total: not today"


def test_raising_hook_aborts_with_cause():
    class Order(Schema):
        total: Annotated[Broken, OmitEmpty()]

    exc = RuntimeError("boom")
    result = encode(Order(total=Broken(raises=exc)))
    assert isinstance(result, Error)
    assert result.field == ("total",)
    assert result.cause is exc
    assert "boom" in result.msg


def test_exception_instance_as_outcome_is_a_failure():
    class Weird:
        def marshal_json(self):
            return "1", ValueError("bad weird")

    result = encode([Weird()])
    assert isinstance(result, Error)
    assert result.msg == "bad weird"
    assert result.field == (0,)


@pytest.mark.parametrize("omit_empty", [True, False])
def test_plain_success_is_unaffected_by_omit_empty(omit_empty):
    class Doc(Schema):
        value = field(omit_empty=omit_empty)

    assert Doc(value=Plain("0")).dumps() == '{"value":0}'
    assert Doc(value=Plain('""')).dumps() == '{"value":""}'
    assert Doc(value=Plain("null")).dumps() == '{"value":null}'


def test_outcome_is_matched_by_identity():
    class LooksLikeZero:
        def __eq__(self, other):
            return True

        __hash__ = object.__hash__

        def __repr__(self):
            return "zero"

    class Sneaky:
        def marshal_json(self):
            return "0", LooksLikeZero()

    class Doc(Schema):
        value: Annotated[Sneaky, OmitEmpty()]

    result = encode(Doc(value=Sneaky()))
    assert isinstance(result, Error)
    assert "Unrecognized outcome" in result.msg


def test_error_returned_without_data():
    class Refuses:
        def marshal_json(self):
            return Error(msg="refused", field=("detail",))

    result = encode({"x": Refuses()})
    assert result == Error(msg="refused", field=("x", "detail"))


class TestTextHook:
    def test_zero_text_value_is_omitted(self):
        class Doc(Schema):
            level: Annotated[Level, OmitEmpty()]
            name: str

        assert Doc(level=Level(), name="n").dumps() == '{"name":"n"}'
        assert Doc(level=Level("debug"), name="n").dumps() == (
            '{"level":"debug","name":"n"}'
        )

    def test_zero_text_value_is_quoted_elsewhere(self):
        assert dumps(Level()) == '""'
        assert dumps([Level("a&b")]) == '["a\\u0026b"]'

    def test_zero_text_map_key_is_still_written(self):
        assert dumps({Level(): 1, Level("x"): 2}) == '{"":1,"x":2}'


def test_hook_may_return_only_zero_state_with_sentinel_and_bytes():
    class Flag:
        def marshal_json(self):
            return b"false", zero

    class Doc(Schema):
        flag: Annotated[Flag, OmitEmpty()]
        other: Flag

    assert Doc(flag=Flag(), other=Flag()).dumps() == '{"other":false}'
