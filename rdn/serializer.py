"""
    RDN serializer

    Writes canonical text to anything with a write() method, depth
    first, as it walks. The ids of the containers on the current path
    are kept so a container that holds itself raises CyclicStructure.
"""
import io
import re
import math
import base64

from .errors import CyclicStructure
from .types import NULL, BOOL, NUMBER, BIGINT, STRING, ARRAY, OBJECT, DATE, TIMEONLY, \
    DURATION, REGEXP, BINARY, MAP, SET, CONTAINERS, kind_of

builtin_values = {None: 'null', True: 'true', False: 'false'}

escaped = {
    '"': '\\"',
    '\\': '\\\\',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
}

needs_escape = re.compile(r'[\x00-\x1f\\"\ud800-\udfff]')


def format_string(s):
    def escape(m):
        c = m.group()
        return escaped.get(c) or '\\u{:04x}'.format(ord(c))
    return '"{}"'.format(needs_escape.sub(escape, s))


def format_number(x):
    """
        Number to text as javascript does it: shortest digits that read
        back the same, no exponent between 1e-7 and 1e21, -0 for negative
        zero

        >>> format_number(1.5e-7), format_number(1e21), format_number(100.0)
        ('1.5e-7', '1e+21', '100')
    """
    try:
        x = float(x)
    except OverflowError as e:
        raise TypeError("Integer too large for an RDN number, use BigInt") from e
    if x != x:
        return 'NaN'
    if math.isinf(x):
        return 'Infinity' if x > 0 else '-Infinity'
    if x == 0:
        return '-0' if math.copysign(1.0, x) < 0 else '0'

    sign = '-' if x < 0 else ''
    text = repr(abs(x))

    # x == 0.digits * 10**n
    mantissa, _, exp = text.partition('e')
    whole, _, frac = mantissa.partition('.')
    digits = (whole + frac).lstrip('0')
    n = len(whole) + int(exp or 0) - (len(whole) + len(frac) - len(digits))
    digits = digits.rstrip('0')
    k = len(digits)

    if k <= n <= 21:
        out = digits + '0' * (n - k)
    elif 0 < n <= 21:
        out = digits[:n] + '.' + digits[n:]
    elif -6 < n <= 0:
        out = '0.' + '0' * -n + digits
    else:
        e = n - 1
        out = digits[0]
        if k > 1:
            out += '.' + digits[1:]
        out += 'e{}{}'.format('+' if e >= 0 else '-', abs(e))
    return sign + out


class Serializer:
    def __init__(self, transform=None):
        self.transform = transform

    def dump(self, obj):
        buf = io.StringIO('')
        self.dump_rdn(obj, buf)
        return buf.getvalue()

    def dump_rdn(self, obj, buf):
        self.write(obj, buf, set())

    def write(self, obj, buf, active):
        if self.transform is not None:
            obj = self.transform(obj)

        kind = kind_of(obj)
        if kind not in CONTAINERS:
            buf.write(self.format_scalar(kind, obj))
            return

        ident = id(obj)
        if ident in active:
            raise CyclicStructure("Cyclic structure: a {} contains itself".format(kind))
        active.add(ident)

        if kind == ARRAY:
            buf.write('[')
            self.write_items(obj, buf, active)
            buf.write(']')
        elif kind == SET:
            buf.write('Set{')
            self.write_items(obj, buf, active)
            buf.write('}')
        elif kind == OBJECT:
            buf.write('{')
            self.write_pairs(obj.items(), ': ', buf, active, string_keys=True)
            buf.write('}')
        elif kind == MAP:
            buf.write('Map{')
            self.write_pairs(obj.items(), ' => ', buf, active)
            buf.write('}')

        active.discard(ident)

    def write_items(self, items, buf, active):
        first = True
        for x in items:
            if first:
                first = False
            else:
                buf.write(", ")
            self.write(x, buf, active)

    def write_pairs(self, pairs, sep, buf, active, string_keys=False):
        first = True
        for k, v in pairs:
            if first:
                first = False
            else:
                buf.write(", ")
            if string_keys:
                # Object() checks its own keys, a dict may hold anything
                if not isinstance(k, str):
                    raise TypeError("Object keys must be str, not {}".format(type(k).__name__))
                buf.write(format_string(k))
            else:
                self.write(k, buf, active)
            buf.write(sep)
            self.write(v, buf, active)

    def format_scalar(self, kind, obj):
        if kind in (NULL, BOOL):
            return builtin_values[obj]
        elif kind == NUMBER:
            return format_number(obj)
        elif kind == STRING:
            return format_string(obj)
        elif kind == BIGINT:
            return '{}n'.format(obj.digits)
        elif kind == DATE:
            return '@{}'.format(obj.isoformat())
        elif kind == TIMEONLY:
            return '@{}'.format(obj.isoformat())
        elif kind == DURATION:
            return '@{}'.format(obj.iso)
        elif kind == REGEXP:
            return '/{}/{}'.format(obj.source, obj.flags)
        elif kind == BINARY:
            return 'b"{}"'.format(base64.standard_b64encode(bytes(obj)).decode('ascii'))
        raise TypeError("Cannot write {} as RDN".format(kind))
