from .testers import Tester, ArgumentTypeError, register_custom_testers, get_custom_testers, resolve_testers, \
    clear_custom_testers
from .equality import ComparisonOptions, UnsupportedComparisonError, EqualityError, equal, assert_equal

__all__ = ['Tester', 'ArgumentTypeError', 'register_custom_testers', 'get_custom_testers', 'resolve_testers',
    'clear_custom_testers', 'ComparisonOptions', 'UnsupportedComparisonError', 'EqualityError', 'equal', 'assert_equal']
