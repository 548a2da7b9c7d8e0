"""
    RDN parser

    A recursive descent over tokenize(), with one token of pushback.

    Bare braces are read by parsing the first element once, then
    looking at the token after it:

        {}              empty Object
        {"k": ...}      Object
        {k => ...}      Map
        {v, ...}, {v}   Set
"""
import re

from contextlib import contextmanager

from .errors import ValidationError, UnexpectedToken, UnexpectedEof, TrailingInput, \
    InvalidObjectKey, NestingTooDeep, InvalidTemporalLiteral, BinaryTooLarge
from .lexer import tokenize, STRING, NUMBER, BIGINT, KEYWORD, TEMPORAL, REGEXP, BASE64, HEX, \
    MAP_OPEN, SET_OPEN, EOF, ARROW
from .types import BigInt, Date, TimeOnly, Duration, RegExp, Object, Map, Set, \
    binary_from_base64, binary_from_hex, kind_of

builtin_names = {
    'null': None,
    'true': True,
    'false': False,
    'NaN': float('nan'),
    'Infinity': float('inf'),
    '-Infinity': float('-inf'),
}

epoch_shape = re.compile(r"[0-9]+")
date_shape = re.compile(r"[0-9]{4}-")
time_shape = re.compile(r"[0-9]{2}:")


def parse_temporal(text):
    """Turn the text after an '@' into a Duration, Date, or TimeOnly"""
    if text.startswith('P'):
        return Duration(text)
    if epoch_shape.fullmatch(text):
        return Date.from_epoch(text)
    if date_shape.match(text):
        return Date.from_iso(text)
    if time_shape.match(text):
        return TimeOnly.from_iso(text)
    raise InvalidTemporalLiteral("Invalid @ literal: {}".format(repr('@' + text)))


class Parser:
    def __init__(self, buf, transform=None, max_depth=None, max_binary_size=None):
        self.buf = buf
        self.tokens = tokenize(buf)
        self.pushback = None
        self.transform = transform
        self.max_depth = max_depth
        self.max_binary_size = max_binary_size
        self.depth = 0

    def parse(self):
        obj = self.parse_value()
        token = self.next()
        if token.kind != EOF:
            raise TrailingInput("Trailing content: {}".format(
                repr(self.buf[token.pos:token.pos + 10])), self.buf, token.pos)
        return obj

    # tokens

    def peek(self):
        if self.pushback is None:
            self.pushback = next(self.tokens)
        return self.pushback

    def next(self):
        token = self.peek()
        self.pushback = None
        return token

    def expect(self, kind):
        token = self.next()
        if token.kind != kind:
            self.unexpected(token, repr(kind))
        return token

    def unexpected(self, token, expecting):
        if token.kind == EOF:
            raise UnexpectedEof("Unexpected end of input, expecting {}".format(expecting), self.buf, token.pos)
        raise UnexpectedToken("Expecting {} but found {}".format(
            expecting, repr(self.buf[token.pos:token.end])), self.buf, token.pos)

    def no_trailing_comma(self, close):
        token = self.peek()
        if token.kind == close:
            raise UnexpectedToken("Trailing comma before {}".format(repr(close)), self.buf, token.pos)

    @contextmanager
    def nested(self, token):
        self.depth += 1
        if self.max_depth is not None and self.depth > self.max_depth:
            raise NestingTooDeep("Maximum nesting depth of {} exceeded".format(self.max_depth), self.buf, token.pos)
        yield
        self.depth -= 1

    def located(self, token, fn, *args):
        try:
            return fn(*args)
        except ValidationError as e:
            raise e.locate(self.buf, token.pos)

    # values

    def parse_value(self):
        return self.finish(self.read_value())

    def finish(self, out):
        if self.transform is not None:
            out = self.transform(out)
        return out

    def read_value(self):
        token = self.next()
        kind = token.kind

        if kind == '[':
            return self.parse_sequence(token, ']')
        elif kind == '(':
            return self.parse_sequence(token, ')')
        elif kind == '{':
            return self.parse_brace(token)
        elif kind == MAP_OPEN:
            return self.parse_map(token)
        elif kind == SET_OPEN:
            return self.parse_set(token)
        elif kind == STRING:
            return token.value
        elif kind == NUMBER:
            return float(token.value)
        elif kind == KEYWORD:
            return builtin_names[token.value]
        elif kind == BIGINT:
            return self.located(token, BigInt, token.value)
        elif kind == TEMPORAL:
            return self.located(token, parse_temporal, token.value)
        elif kind == REGEXP:
            return self.located(token, RegExp, *token.value)
        elif kind == BASE64:
            return self.read_binary(token, binary_from_base64)
        elif kind == HEX:
            return self.read_binary(token, binary_from_hex)

        self.unexpected(token, "a value")

    def read_binary(self, token, decode):
        out = self.located(token, decode, token.value)
        if self.max_binary_size is not None and len(out) > self.max_binary_size:
            raise BinaryTooLarge("Binary data too large: {} bytes, limit is {}".format(
                len(out), self.max_binary_size), self.buf, token.pos)
        return out

    def parse_sequence(self, start, close):
        # [a, b] and (a, b) are both arrays
        out = []
        with self.nested(start):
            if self.peek().kind == close:
                self.next()
                return out
            while True:
                out.append(self.parse_value())
                token = self.next()
                if token.kind == close:
                    return out
                if token.kind != ',':
                    self.unexpected(token, "',' or {}".format(repr(close)))
                self.no_trailing_comma(close)

    def parse_brace(self, start):
        with self.nested(start):
            if self.peek().kind == '}':
                self.next()
                return Object()

            first_token = self.peek()
            first = self.read_value()

            token = self.peek()
            if token.kind == ':':
                if not isinstance(first, str):
                    raise InvalidObjectKey("Object keys must be strings, found {}".format(
                        kind_of(first)), self.buf, first_token.pos)
                return self.parse_object_entries(first)
            elif token.kind == ARROW:
                return self.parse_map_entries(self.finish(first))
            elif token.kind in (',', '}'):
                return self.parse_set_members(self.finish(first))

            self.unexpected(token, "':', '=>', ',' or '}'")

    def parse_object_entries(self, key):
        entries = []
        while True:
            self.expect(':')
            entries.append((key, self.parse_value()))

            token = self.next()
            if token.kind == '}':
                return Object(entries)
            if token.kind != ',':
                self.unexpected(token, "',' or '}'")

            self.no_trailing_comma('}')
            token = self.next()
            if token.kind == STRING:
                key = token.value
            elif token.kind == EOF:
                self.unexpected(token, "a string key")
            else:
                raise InvalidObjectKey("Object keys must be strings, found {}".format(
                    repr(self.buf[token.pos:token.end])), self.buf, token.pos)

    def parse_map(self, start):
        with self.nested(start):
            if self.peek().kind == '}':
                self.next()
                return Map()
            return self.parse_map_entries(self.parse_value())

    def parse_map_entries(self, key):
        entries = []
        while True:
            self.expect(ARROW)
            entries.append((key, self.parse_value()))

            token = self.next()
            if token.kind == '}':
                return Map(entries)
            if token.kind != ',':
                self.unexpected(token, "',' or '}'")

            self.no_trailing_comma('}')
            key = self.parse_value()

    def parse_set(self, start):
        with self.nested(start):
            if self.peek().kind == '}':
                self.next()
                return Set()
            return self.parse_set_members(self.parse_value())

    def parse_set_members(self, first):
        members = [first]
        while True:
            token = self.next()
            if token.kind == '}':
                return Set(members)
            if token.kind != ',':
                self.unexpected(token, "',' or '}'")

            self.no_trailing_comma('}')
            members.append(self.parse_value())
