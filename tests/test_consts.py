import copy
import pickle

from marshalcat import Error, omitted, zero
from marshalcat.consts import ZERO


def test_zero_is_not_an_error():
    assert not isinstance(zero, (Error, Exception))
    assert repr(zero) == "zero"
    assert str(zero) == "zero"


def test_zero_keeps_its_identity():
    assert copy.copy(zero) is zero
    assert copy.deepcopy(zero) is zero
    assert pickle.loads(pickle.dumps(zero)) is zero


def test_zero_is_distinct_from_other_instances():
    assert ZERO() is not zero
    assert zero is not omitted


def test_omitted_keeps_its_identity():
    assert copy.copy(omitted) is omitted
    assert pickle.loads(pickle.dumps(omitted)) is omitted
