"""
Process-wide registry of custom equality testers.

A tester is any callable ``tester(a, b, testers)`` returning True/False to decide equality of `a` and `b`, or None to
defer to the default rules of :func:`~deepeq_utils.pythonutils.equality.equal`. The registry only ever grows during
normal use; :func:`clear_custom_testers` exists for isolating tests and is never called implicitly.
"""

import logging
from threading import Lock
from typing import Any, Callable, Optional, Sequence, TYPE_CHECKING


if TYPE_CHECKING:
    from typing import List, Tuple


# (a, b, all_testers) -> True/False, or None for 'no opinion'
Tester = Callable[[Any, Any, Sequence[Any]], Optional[bool]]

logger = logging.getLogger(__name__)

_CUSTOM_TESTERS: 'List[Tester]' = []
_CUSTOM_TESTERS_LOCK = Lock()


class ArgumentTypeError(TypeError):
    """Error raised when :func:`register_custom_testers` is passed something other than a list/tuple of testers"""


def register_custom_testers(testers: 'Sequence[Tester]') -> 'None':
    """Appends the given testers to the end of the process-wide tester list, keeping their relative order.

    Args:
        testers (Sequence[Tester]): a list or tuple of tester callables

    Raises:
        ArgumentTypeError: if `testers` is not a list or tuple
    """
    if not isinstance(testers, (list, tuple)):
        raise ArgumentTypeError("`testers` arg must be a list or tuple of testers, not %s" % repr(type(testers).__name__))

    with _CUSTOM_TESTERS_LOCK:
        _CUSTOM_TESTERS.extend(testers)
        total = len(_CUSTOM_TESTERS)
    logger.debug("Registered %d custom tester(s), %d now registered", len(testers), total)


def get_custom_testers() -> 'Tuple[Tester, ...]':
    """Returns a read-only snapshot of the registered testers, in registration order"""
    with _CUSTOM_TESTERS_LOCK:
        return tuple(_CUSTOM_TESTERS)


def resolve_testers(local_testers: 'Sequence[Tester]' = ()) -> 'Tuple[Tester, ...]':
    """Returns the registered testers followed by `local_testers`, which is the list an assertion should compare with"""
    return get_custom_testers() + tuple(local_testers)


def clear_custom_testers() -> 'None':
    """Removes every registered tester. Administrative use only (eg: resetting state between tests)"""
    with _CUSTOM_TESTERS_LOCK:
        removed = len(_CUSTOM_TESTERS)
        _CUSTOM_TESTERS.clear()
    logger.debug("Cleared %d custom tester(s)", removed)
