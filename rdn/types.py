"""
    the RDN value model

    RDN values are plain python objects wherever python has a type that
    fits exactly:

        null            None
        true, false     bool
        numbers         float (int is accepted when writing)
        strings         str
        arrays          list (tuple is accepted when writing)
        binary          bytes (bytearray, memoryview accepted when writing)

    and the classes in this file for the rest:

        BigInt, Date, TimeOnly, Duration, RegExp,
        Object, Map, Set

    Object, Map and Set are ordered and immutable, and keep repeated
    keys or members as given. Comparing values is structural, through
    values_equal(): True is not 1.0, [1.0] is not Set{1}, and NaN is NaN.

    Constructors validate their payload, raising the errors in errors.py.
"""
import re
import math
import base64

from datetime import datetime, timedelta, timezone

from .errors import InvalidBigInt, InvalidTimeOnly, InvalidRegExpFlags, InvalidRegExpSource, \
    InvalidTemporalLiteral, InvalidDate, InvalidBase64, InvalidHex, InvalidObjectKey

NULL = 'Null'
BOOL = 'Bool'
NUMBER = 'Number'
BIGINT = 'BigInt'
STRING = 'String'
ARRAY = 'Array'
OBJECT = 'Object'
DATE = 'Date'
TIMEONLY = 'TimeOnly'
DURATION = 'Duration'
REGEXP = 'RegExp'
BINARY = 'Binary'
MAP = 'Map'
SET = 'Set'

CONTAINERS = frozenset((ARRAY, OBJECT, MAP, SET))

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# 0001-01-01T00:00:00.000Z .. 9999-12-31T23:59:59.999Z
MIN_MILLIS = -62135596800000
MAX_MILLIS = 253402300799999
max_epoch_digits = 16

REGEXP_FLAGS = "dgimsuvy"

bigint_digits = re.compile(r"-?[0-9]+")
epoch_digits = re.compile(r"[0-9]+")
iso_date = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})(?:T([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{3}))?)?Z?")
iso_time = re.compile(r"([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]{3}))?")
iso_duration = re.compile(
    r"P(?:[0-9]+Y)?(?:[0-9]+M)?(?:[0-9]+D)?(?:T(?:[0-9]+H)?(?:[0-9]+M)?(?:[0-9]+(?:\.[0-9]+)?S)?)?")
base64_text = re.compile(r"(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?")
hex_text = re.compile(r"(?:[0-9a-fA-F]{2})*")

regexp_escapes = {
    '/': '\\/',
    '\n': '\\n',
    '\r': '\\r',
    '\u2028': '\\u2028',
    '\u2029': '\\u2029',
}


class RDNType:
    """Base for the value classes, compared and hashed by their slots"""
    __slots__ = ()
    kind = None

    def _key(self):
        return tuple(getattr(self, name) for name in self.__slots__)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((self.kind, self._key()))

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__, ", ".join(repr(x) for x in self._key()))


class BigInt(RDNType):
    """An arbitrary precision integer, kept as its decimal digits (leading zeros and all)"""
    __slots__ = ('digits',)
    kind = BIGINT

    def __init__(self, digits):
        if isinstance(digits, int) and not isinstance(digits, bool):
            digits = str(digits)
        if not isinstance(digits, str) or not bigint_digits.fullmatch(digits):
            raise InvalidBigInt("Invalid BigInt: {}".format(repr(digits)))
        self.digits = digits

    def __int__(self):
        return int(self.digits)

    def __index__(self):
        return int(self.digits)


class Date(RDNType):
    """
        A UTC instant, as milliseconds since 1970-01-01T00:00:00Z

        fractional milliseconds are floored on the way in, so every Date
        reads back from its text unchanged.
    """
    __slots__ = ('millis',)
    kind = DATE

    def __init__(self, millis):
        if isinstance(millis, bool) or not isinstance(millis, (int, float)):
            raise InvalidDate("Date needs a number of milliseconds, not {}".format(repr(millis)))
        try:
            millis = float(millis)
        except OverflowError as e:
            raise InvalidDate("Date out of range: integer too large for milliseconds") from e
        if not math.isfinite(millis) or not (MIN_MILLIS <= millis < MAX_MILLIS + 1):
            raise InvalidDate("Date out of range: {}".format(repr(millis)))
        self.millis = float(math.floor(millis))

    @classmethod
    def from_datetime(cls, dt):
        """naive datetimes are taken to be UTC already"""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls((dt - EPOCH) / timedelta(milliseconds=1))

    @classmethod
    def from_iso(cls, text):
        m = iso_date.fullmatch(text)
        if not m:
            raise InvalidDate("Invalid date, expected YYYY-MM-DD[THH:MM:SS[.mmm]]Z in UTC: {}".format(repr(text)))
        fields = [int(x) if x else 0 for x in m.groups()]
        year, month, day, hour, minute, second, ms = fields
        try:
            dt = datetime(year, month, day, hour, minute, second, ms * 1000, tzinfo=timezone.utc)
        except ValueError as e:
            raise InvalidDate("Invalid date {}: {}".format(repr(text), e)) from e
        return cls.from_datetime(dt)

    @classmethod
    def from_epoch(cls, digits):
        """Up to ten digits count seconds, anything longer counts milliseconds"""
        if not epoch_digits.fullmatch(digits):
            raise InvalidDate("Invalid epoch timestamp: {}".format(repr(digits)))
        if len(digits) > max_epoch_digits:
            raise InvalidDate("Epoch timestamp out of range: {} digits".format(len(digits)))
        if len(digits) <= 10:
            return cls(int(digits) * 1000)
        return cls(int(digits))

    def to_datetime(self):
        return EPOCH + timedelta(milliseconds=self.millis)

    def isoformat(self):
        dt = EPOCH + timedelta(milliseconds=self.millis)
        return "{:04d}-{:02d}-{:02d}T{:02d}:{:02d}:{:02d}.{:03d}Z".format(
            dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, dt.microsecond // 1000)


class TimeOnly(RDNType):
    __slots__ = ('hours', 'minutes', 'seconds', 'milliseconds')
    kind = TIMEONLY

    limits = (('hours', 23), ('minutes', 59), ('seconds', 59), ('milliseconds', 999))

    def __init__(self, hours, minutes, seconds, milliseconds=0):
        values = (hours, minutes, seconds, milliseconds)
        for (name, limit), value in zip(self.limits, values):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidTimeOnly("TimeOnly {} must be an integer, not {}".format(name, repr(value)))
            if not 0 <= value <= limit:
                raise InvalidTimeOnly("TimeOnly {} out of range 0-{}: {}".format(name, limit, value))
        self.hours, self.minutes, self.seconds, self.milliseconds = values

    @classmethod
    def from_iso(cls, text):
        m = iso_time.fullmatch(text)
        if not m:
            raise InvalidTemporalLiteral("Invalid time, expected HH:MM:SS[.mmm]: {}".format(repr(text)))
        hours, minutes, seconds, ms = m.groups()
        return cls(int(hours), int(minutes), int(seconds), int(ms) if ms else 0)

    def isoformat(self):
        out = "{:02d}:{:02d}:{:02d}".format(self.hours, self.minutes, self.seconds)
        if self.milliseconds:
            out = "{}.{:03d}".format(out, self.milliseconds)
        return out


class Duration(RDNType):
    """An ISO 8601 duration, kept as written: P1Y2M3DT4H5M6S"""
    __slots__ = ('iso',)
    kind = DURATION

    def __init__(self, iso):
        if not isinstance(iso, str) or not iso_duration.fullmatch(iso) \
                or iso in ('P', 'PT') or iso.endswith('T'):
            raise InvalidTemporalLiteral("Invalid ISO 8601 duration: {}".format(repr(iso)))
        self.iso = iso


class RegExp(RDNType):
    """
        A regular expression, source and flags, never compiled

        The source is normalised the way javascript does it, escaping
        bare slashes and line breaks, so /source/flags always reads back
        the same.
    """
    __slots__ = ('source', 'flags')
    kind = REGEXP

    def __init__(self, source, flags=""):
        if not isinstance(source, str):
            raise InvalidRegExpSource("RegExp source must be a string, not {}".format(repr(source)))
        if not isinstance(flags, str):
            raise InvalidRegExpFlags("RegExp flags must be a string, not {}".format(repr(flags)))
        for n, flag in enumerate(flags):
            if flag not in REGEXP_FLAGS:
                raise InvalidRegExpFlags("Unknown RegExp flag {} in {}".format(repr(flag), repr(flags)))
            if flag in flags[:n]:
                raise InvalidRegExpFlags("Duplicate RegExp flag {} in {}".format(repr(flag), repr(flags)))
        self.source = normalize_source(source)
        self.flags = flags


def normalize_source(source):
    out = []
    escape = False
    for c in source:
        if escape:
            # a backslash before a line break: keep the backslash, spell out the break
            out.append(regexp_escapes[c][1:] if c in regexp_escapes and c != '/' else c)
            escape = False
        elif c == '\\':
            out.append(c)
            escape = True
        else:
            out.append(regexp_escapes.get(c, c))
    if escape:
        raise InvalidRegExpSource("RegExp source ends with a lone backslash: {}".format(repr(source)))
    return "".join(out)


class _Entries(RDNType):
    __slots__ = ('_items',)
    __hash__ = None

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __eq__(self, other):
        if not isinstance(other, _Entries):
            return NotImplemented
        return values_equal(self, other)

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__, repr(list(self._items)))


class _Pairs(_Entries):
    """read only lookup over an ordered list of (key, value) pairs, the last pair for a key wins"""
    __slots__ = ()

    def __init__(self, entries=()):
        if isinstance(entries, (dict, _Pairs)):
            entries = entries.items()
        items = []
        for key, value in entries:
            self._check_key(key)
            items.append((key, value))
        self._items = tuple(items)

    def _check_key(self, key):
        pass

    def __iter__(self):
        for key, _ in self._items:
            yield key

    def __contains__(self, key):
        return any(values_equal(key, k) for k, _ in self._items)

    def __getitem__(self, key):
        for k, v in reversed(self._items):
            if values_equal(key, k):
                return v
        raise KeyError(key)

    def get(self, key, default=None):
        try:
            return self[key]
        except KeyError:
            return default

    def get_all(self, key):
        return [v for k, v in self._items if values_equal(key, k)]

    def keys(self):
        return [k for k, _ in self._items]

    def values(self):
        return [v for _, v in self._items]

    def items(self):
        return list(self._items)


class Object(_Pairs):
    """{"key": value, ...}, string keys only"""
    __slots__ = ()
    kind = OBJECT

    def _check_key(self, key):
        if not isinstance(key, str):
            raise InvalidObjectKey("Object keys must be strings, not {}".format(type(key).__name__))

    def to_dict(self):
        return dict(self._items)


class Map(_Pairs):
    """Map{key => value, ...}, where keys can be any value"""
    __slots__ = ()
    kind = MAP


class Set(_Entries):
    """Set{value, ...}, in the order given, repeats and all"""
    __slots__ = ()
    kind = SET

    def __init__(self, members=()):
        self._items = tuple(members)

    def __iter__(self):
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __contains__(self, value):
        return any(values_equal(value, x) for x in self._items)


def binary_from_base64(text):
    if not base64_text.fullmatch(text):
        raise InvalidBase64("Invalid base64: {}".format(repr(text[:20])))
    data = base64.standard_b64decode(text)
    if base64.standard_b64encode(data).decode('ascii') != text:
        raise InvalidBase64("Invalid base64, non-zero padding bits: {}".format(repr(text[-4:])))
    return data


def binary_from_hex(text):
    if len(text) % 2:
        raise InvalidHex("Invalid hex, odd number of digits: {}".format(len(text)))
    if not hex_text.fullmatch(text):
        raise InvalidHex("Invalid hex: {}".format(repr(text[:20])))
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidHex("Invalid hex: {}".format(e)) from e


def kind_of(value):
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOL
    if isinstance(value, (float, int)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, RDNType):
        return value.kind
    if isinstance(value, (list, tuple)):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BINARY
    raise TypeError("Object of type {} is not an RDN value".format(type(value).__name__))


def values_equal(a, b):
    kind = kind_of(a)
    if kind != kind_of(b):
        return False
    if kind == NUMBER:
        return a == b or (a != a and b != b)
    if kind in (ARRAY, SET):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    if kind in (OBJECT, MAP):
        a, b = list(a.items()), list(b.items())
        return len(a) == len(b) and all(
            values_equal(k1, k2) and values_equal(v1, v2) for (k1, v1), (k2, v2) in zip(a, b))
    if kind == BINARY:
        return bytes(a) == bytes(b)
    return a == b
