"""
Utils for determining deep structural equality of objects, as used by assertions

Handled types, in the order they are checked at every node:
    - custom testers (see :mod:`~deepeq_utils.pythonutils.testers`), which can decide any pair before the rules below
    - re.Pattern and urllib.parse results (compared by their canonical string forms)
    - datetime, date, np.datetime64 (compared by timestamp, with NaT equal to NaT)
    - exceptions (compared by message only)
    - int, float, complex, np.number (with NaN equal to NaN, and bools never numeric)
    - str, bytes-likes, bool, range (compared by value against their own group only)
    - mappings and sets (unordered, with keys compared deeply)
    - list, tuple, np.ndarray (compared by index)
    - weakref.ref (compared by referent)
    - any other object with a __dict__ or __slots__ (compared by attribute)

Self-referential objects are fine: every call to :func:`equal` keeps its own record of which pairs of objects are
currently assumed equal, so walking back into a pair ends the recursion.
"""

import datetime
import logging
import math
import numpy as np
from collections.abc import Mapping
from dataclasses import dataclass
from .pytypes import PrimitiveGroups, NumericTypes, DateLikeTypes, RegexLikeTypes, URLLikeTypes, ErrorLikeTypes, \
    WeakMapTypes, WeakSetTypes, WeakRefTypes, KeyedCollectionTypes, SequenceTypes, StructuredTypes, OpaqueTypes, \
    PlainTypes
from .testers import resolve_testers
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Dict, List, Optional, Sequence, Tuple
    from .testers import Tester


logger = logging.getLogger(__name__)

MAX_REPR_LEN = 1000

_MISSING = object()
_EPOCH = datetime.datetime(1970, 1, 1)
_EPOCH_UTC = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
_EPOCH_DATE = datetime.date(1970, 1, 1)
_NP_EPOCH = np.datetime64(0, 's')


@dataclass(frozen=True)
class ComparisonOptions:
    """Options passed to :func:`equal`

    Attributes:
        custom_testers (Sequence[Tester]): testers to consult, in order, before the default rules at every node
        strict_check (bool): if True, structured values must be of the same type, and a key holding None on one side
            is no longer ignored when the other side does not have it
    """
    custom_testers: 'Sequence[Tester]' = ()
    strict_check: 'bool' = False


def equal(a: 'Any', b: 'Any', options: 'Optional[ComparisonOptions]' = None) -> 'bool':
    """
    Determines whether `a` and `b` are deeply equal.

    Always returns a bool for ordinary mismatches (different types, values, keys, sizes). The only error raised by
    the comparison itself is ``UnsupportedComparisonError``, when both sides are weak collections of the same kind.
    Errors raised by custom testers are propagated as-is.

    NOTE: None doubles as the 'absent' value: a key missing on one side reads as None, and a dead weak reference
    dereferences to None. Outside of `strict_check`, ``{'a': None}`` is equal to ``{}``.

    NOTE: the tester list is copied once at the start of the call, so testers registered while a comparison is
    running are not seen by it.

    Args:
        a (Any): object to check equality
        b (Any): object to check equality
        options (Optional[ComparisonOptions]): custom testers and strictness. Defaults to no testers, non-strict.

    Returns:
        bool: True if `a` and `b` are equal, False otherwise
    """
    if options is None:
        options = ComparisonOptions()
    testers = tuple(options.custom_testers)
    strict_check = options.strict_check

    # id(left) -> (left, right), keeping left alive so its id cannot be reused mid-call
    seen: 'Dict[int, Tuple[Any, Any]]' = {}
    # (id(left), previous seen entry) for every write to `seen`, in order
    undo_log: 'List[Tuple[int, Any]]' = []

    def compare(x, y):
        for tester in testers:
            verdict = tester(x, y, testers)
            if verdict is not None:
                return bool(verdict)

        x, y = _unwrap_scalar(x), _unwrap_scalar(y)

        if (isinstance(x, RegexLikeTypes) and isinstance(y, RegexLikeTypes)) or \
                (isinstance(x, URLLikeTypes) and isinstance(y, URLLikeTypes)):
            return _canonical_str(x) == _canonical_str(y)

        if isinstance(x, DateLikeTypes) and isinstance(y, DateLikeTypes):
            x_time, y_time = _timestamp(x), _timestamp(y)
            if math.isnan(x_time) and math.isnan(y_time):
                return True
            return x_time == y_time

        if isinstance(x, ErrorLikeTypes) and isinstance(y, ErrorLikeTypes):
            return str(x) == str(y)

        if _is_numeric(x) and _is_numeric(y):
            return (_is_nan(x) and _is_nan(y)) or bool(x == y)

        if _same_value(x, y):
            return True

        x_structured, y_structured = _is_structured(x), _is_structured(y)
        if x_structured and y_structured:
            return compare_structured(x, y)

        # Fall back on built-in __eq__ for values of the same type that can't be walked (timedelta, Decimal, etc.)
        if not x_structured and not y_structured and type(x) is type(y):
            return bool(x == y)

        return False

    def compare_structured(x, y):
        if strict_check and not _types_match(x, y):
            return False

        for weak_types, kind in ((WeakMapTypes, 'weak mapping'), (WeakSetTypes, 'weak set')):
            if isinstance(x, weak_types) or isinstance(y, weak_types):
                if not (isinstance(x, weak_types) and isinstance(y, weak_types)):
                    return False
                logger.debug("Refusing to compare %s instances of types %s and %s", kind,
                    type(x).__name__, type(y).__name__)
                raise UnsupportedComparisonError("Cannot compare %s instances, their contents cannot be inspected: "
                    "%s and %s" % (kind, repr(type(x).__name__), repr(type(y).__name__)))

        previous = seen.get(id(x), _MISSING)
        if previous is not _MISSING and previous[1] is y:
            return True

        x_items, y_items = _own_items(x), _own_items(y)

        # Keyed collections count their entries themselves, so a mapping can still match a set
        if not (isinstance(x, KeyedCollectionTypes) and isinstance(y, KeyedCollectionTypes)):
            if strict_check:
                x_count, y_count = len(x_items), len(y_items)
            else:
                x_count, y_count = _present_count(x_items, y_items), _present_count(y_items, x_items)
            if x_count != y_count:
                return False

        # Assume the pair is equal while checking its contents. If it turns out wrong, forget that assumption along
        # with every pair accepted beneath it, since those may only have held because of it
        mark = len(undo_log)
        undo_log.append((id(x), previous))
        seen[id(x)] = (x, y)
        result = compare_contents(x, y, x_items, y_items)
        if not result:
            while len(undo_log) > mark:
                key, old = undo_log.pop()
                if old is _MISSING:
                    seen.pop(key, None)
                else:
                    seen[key] = old
        return result

    def compare_contents(x, y, x_items, y_items):
        if isinstance(x, KeyedCollectionTypes) and isinstance(y, KeyedCollectionTypes):
            skip_absent = not strict_check and isinstance(x, Mapping) and isinstance(y, Mapping)
            x_entries = _entries(x, x_items, y_items, skip_absent)
            y_entries = _entries(y, y_items, x_items, skip_absent)
            if len(x_entries) != len(y_entries):
                return False

            # Keys may be arbitrary objects, so entries can't be matched by hash. Pair them off one by one instead
            unmatched = list(y_entries)
            for x_key, x_value in x_entries:
                for i, (y_key, y_value) in enumerate(unmatched):
                    if compare(x_key, y_key) and ((x_key is x_value and y_key is y_value) or compare(x_value, y_value)):
                        del unmatched[i]
                        break
                else:
                    return False
            return True

        for key in {**x_items, **y_items}:
            x_value, y_value = x_items.get(key), y_items.get(key)
            if not compare(x_value, y_value):
                return False
            if (x_value is not None and key not in y_items) or (y_value is not None and key not in x_items):
                return False

        if isinstance(x, WeakRefTypes) or isinstance(y, WeakRefTypes):
            if not (isinstance(x, WeakRefTypes) and isinstance(y, WeakRefTypes)):
                return False
            return compare(x(), y())

        return True

    return compare(a, b)


def assert_equal(actual: 'Any', expected: 'Any', custom_testers: 'Sequence[Tester]' = (), strict_check: 'bool' = False,
    use_registered: 'bool' = True) -> 'None':
    """Raises an ``EqualityError`` if `actual` and `expected` are not equal according to :func:`equal`

    Args:
        actual (Any): the value produced by the code under test
        expected (Any): the value it should equal
        custom_testers (Sequence[Tester]): testers for this assertion only. They are consulted after the registered
            testers
        strict_check (bool): passed along as ``ComparisonOptions.strict_check``. Defaults to False.
        use_registered (bool): if True, the testers from
            :func:`~deepeq_utils.pythonutils.testers.register_custom_testers` are used as well. Defaults to True.
    """
    testers = resolve_testers(custom_testers) if use_registered else tuple(custom_testers)
    if not equal(actual, expected, ComparisonOptions(custom_testers=testers, strict_check=strict_check)):
        raise EqualityError(actual, expected, "Values are not strictly equal" if strict_check else None)


def _unwrap_scalar(value):
    """0-d numpy arrays are compared as the scalar they hold"""
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return value.item()
    return value


def _canonical_str(value):
    if isinstance(value, RegexLikeTypes):
        return '/%r/%d' % (value.pattern, value.flags)
    return value.geturl()


def _timestamp(value: 'Any') -> 'float':
    """Seconds since the epoch for a date-like value, NaN for NaT"""
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return math.nan
        return float((value - _NP_EPOCH) / np.timedelta64(1, 's'))
    if isinstance(value, datetime.datetime):
        return (value - (_EPOCH if value.tzinfo is None else _EPOCH_UTC)).total_seconds()
    return float((value - _EPOCH_DATE).days * 86400)


def _is_numeric(value):
    return isinstance(value, NumericTypes) and not isinstance(value, (bool, np.bool_))


def _is_nan(value):
    return bool(value != value)


def _same_value(a, b):
    if a is b:
        return True
    return any(isinstance(a, group) and isinstance(b, group) for group in PrimitiveGroups) and bool(a == b)


def _is_structured(value):
    if value is None or isinstance(value, OpaqueTypes):
        return False
    if isinstance(value, StructuredTypes):
        return True
    return hasattr(value, '__dict__') or len(_slot_names(type(value))) > 0


def _types_match(a, b):
    """Strict type check, letting plain dicts and SimpleNamespaces stand in for one another"""
    return type(a) is type(b) or (type(a) in PlainTypes and type(b) in PlainTypes)


def _slot_names(cls: 'type') -> 'List[str]':
    names = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ('__dict__', '__weakref__') and name not in names:
                names.append(name)
    return names


def _own_items(value: 'Any') -> 'Dict[Any, Any]':
    """Returns the own keys of a structured value mapped to their values"""
    if isinstance(value, Mapping):
        return dict(value.items())
    if isinstance(value, np.matrix):
        # Rows of a matrix are still 2-d matrices, so walk it as a plain array
        return dict(enumerate(np.asarray(value)))
    if isinstance(value, SequenceTypes):
        return dict(enumerate(value))
    if isinstance(value, KeyedCollectionTypes + WeakRefTypes):
        return {}

    items = dict(getattr(value, '__dict__', {}))
    for name in _slot_names(type(value)):
        if name not in items and hasattr(value, name):
            items[name] = getattr(value, name)
    return items


def _present_count(items, other_items):
    """Number of keys, not counting those holding None that the other side doesn't have at all"""
    return sum(1 for key, value in items.items() if value is not None or key in other_items)


def _entries(value, items, other_items, skip_absent):
    """(key, value) entries of a keyed collection. Set elements are their own keys"""
    if isinstance(value, Mapping):
        return [(k, v) for k, v in items.items() if not (skip_absent and v is None and k not in other_items)]
    return [(element, element) for element in value]


def _limit_str(a, limit=MAX_REPR_LEN):
    a_str = repr(a)
    return a_str if len(a_str) < limit else (a_str[:limit] + '...')


class UnsupportedComparisonError(TypeError):
    """Error raised by :func:`equal` when both values are weak collections of the same kind, whose contents can't be
    compared"""


class EqualityError(AssertionError):
    """Error raised whenever :func:`assert_equal` finds its values unequal"""

    def __init__(self, a, b, message=None):
        message = "Values are not equal" if message is None else message
        super().__init__("Object a (%s) is not equal to object b (%s)\na: %s\nb: %s\nMessage: %s" % \
            (repr(type(a).__name__), repr(type(b).__name__), _limit_str(a), _limit_str(b), message))
