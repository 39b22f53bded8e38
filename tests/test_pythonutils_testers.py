"""
Tests for the deepeq_utils.pythonutils.testers file, and how registered testers reach assert_equal().
"""

import pytest
from deepeq_utils.pythonutils.equality import EqualityError, assert_equal
from deepeq_utils.pythonutils.testers import ArgumentTypeError, clear_custom_testers, get_custom_testers, \
    register_custom_testers, resolve_testers


def _tester_a(a, b, testers):
    return None


def _tester_b(a, b, testers):
    return None


def _ints_always_equal(a, b, testers):
    if isinstance(a, int) and isinstance(b, int):
        return True
    return None


@pytest.fixture(autouse=True)
def _empty_registry():
    clear_custom_testers()
    yield
    clear_custom_testers()


def test_register_keeps_order():
    """Testers are appended in order, after those already registered"""
    assert get_custom_testers() == ()

    register_custom_testers([_tester_a, _tester_b])
    assert get_custom_testers() == (_tester_a, _tester_b)

    register_custom_testers((_tester_b,))
    register_custom_testers([])
    assert get_custom_testers() == (_tester_a, _tester_b, _tester_b)


def test_register_bad_type():
    """Only lists/tuples of testers can be registered"""
    for bad in (_tester_a, 'not testers', {_tester_a}, None, 3):
        with pytest.raises(ArgumentTypeError) as exc_info:
            register_custom_testers(bad)
        assert repr(type(bad).__name__) in str(exc_info.value)

    assert issubclass(ArgumentTypeError, TypeError)
    assert get_custom_testers() == ()


def test_get_is_snapshot():
    """Registering after a get() does not change what was returned"""
    register_custom_testers([_tester_a])
    snapshot = get_custom_testers()
    register_custom_testers([_tester_b])

    assert snapshot == (_tester_a,)
    assert get_custom_testers() == (_tester_a, _tester_b)


def test_resolve_testers():
    """Registered testers come before call-local ones"""
    assert resolve_testers() == ()
    assert resolve_testers([_tester_b]) == (_tester_b,)

    register_custom_testers([_tester_a])
    assert resolve_testers([_tester_b]) == (_tester_a, _tester_b)
    assert resolve_testers() == (_tester_a,)


def test_assert_equal_uses_registered():
    """assert_equal() picks up registered testers unless told not to"""
    with pytest.raises(EqualityError):
        assert_equal([1, 2], [3, 4])

    register_custom_testers([_ints_always_equal])
    assert_equal([1, 2], [3, 4])
    assert_equal({'a': 1}, {'a': 100})

    with pytest.raises(EqualityError):
        assert_equal([1, 2], [3, 4], use_registered=False)
