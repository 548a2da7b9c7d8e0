"""
    rdn: a JSON superset with bigints, dates, times, durations,
    regular expressions, binary data, maps and sets

        >>> import rdn
        >>> rdn.dump(rdn.parse('{"id": 42n, "tags": Set{"a"}}'))
        '{"id": 42n, "tags": Set{"a"}}'
"""
from logging import getLogger, NullHandler

from .errors import *
from .types import BigInt, Date, TimeOnly, Duration, RegExp, Object, Map, Set, \
    kind_of, values_equal
from .lexer import tokenize, Token
from .codec import Codec, CONTENT_TYPE

getLogger(__name__).addHandler(NullHandler())

_default = Codec()

parse = _default.parse
dump = _default.dump
dump_rdn = _default.dump_rdn
