"""
Groups of python types used to discover what 'kind' of value is being compared.

Each constant is a tuple usable with isinstance(). Kinds are checked pairwise by
:func:`~deepeq_utils.pythonutils.equality.equal`, so both sides must fall in the same tuple for a kind-specific
rule to apply.
"""

import re
import datetime
import enum
import functools
import types
import weakref
import numpy as np
from collections.abc import Mapping, Set
from urllib.parse import ParseResult, SplitResult, ParseResultBytes, SplitResultBytes


# Immutable values compared with '==' against values of the same group only
PrimitiveGroups = (
    (str,),
    (bytes, bytearray, memoryview),
    (bool, np.bool_),
    (range,),
)

# Bool's are checked separately, they are never numeric here
NumericTypes = (int, float, complex, np.number)

DateLikeTypes = (datetime.datetime, datetime.date, np.datetime64)
RegexLikeTypes = (re.Pattern,)
URLLikeTypes = (ParseResult, SplitResult, ParseResultBytes, SplitResultBytes)
ErrorLikeTypes = (BaseException,)

# Collections whose contents cannot be meaningfully inspected
WeakMapTypes = (weakref.WeakKeyDictionary, weakref.WeakValueDictionary)
WeakSetTypes = (weakref.WeakSet,)
WeakRefTypes = (weakref.ref,)

KeyedCollectionTypes = (Mapping, Set)
SequenceTypes = (list, tuple, np.ndarray)

# Types that are always structured
StructuredTypes = KeyedCollectionTypes + SequenceTypes + WeakMapTypes + WeakSetTypes + WeakRefTypes

# Objects that carry a __dict__ (possibly empty, with their real state hidden in C) but are compared with __eq__
OpaqueTypes = (type, types.FunctionType, types.BuiltinFunctionType, types.MethodType, types.ModuleType, enum.Enum,
    functools.partial)

# Plain containers that match one another under strict checking
PlainTypes = (dict, types.SimpleNamespace)
