"""
    RDN tokenizer

    tokenize(buf) lazily yields Token(kind, value, pos, end) until it
    yields a single EOF token. pos/end are character offsets into buf.

    kinds and values:

        { } [ ] ( ) , : =>      punctuation, value is the text
        STRING                  unescaped str
        NUMBER                  raw text, i.e "-1.5e3"
        BIGINT                  raw text without the 'n', i.e "-42"
        KEYWORD                 true false null NaN Infinity -Infinity
        TEMPORAL                raw text after the '@'
        REGEXP                  (source, flags)
        BASE64, HEX             raw text between the quotes
        MAP_OPEN, SET_OPEN      'Map{' and 'Set{', brace included
        EOF                     None
"""
import re

from collections import namedtuple

from .errors import UnexpectedCharacter, UnterminatedString, InvalidEscape

Token = namedtuple('Token', 'kind value pos end')

STRING = 'string'
NUMBER = 'number'
BIGINT = 'bigint'
KEYWORD = 'keyword'
TEMPORAL = 'temporal'
REGEXP = 'regexp'
BASE64 = 'base64'
HEX = 'hex'
MAP_OPEN = 'Map{'
SET_OPEN = 'Set{'
EOF = 'eof'

ARROW = '=>'
punctuation = set('{}[](),:')

keywords = set(['true', 'false', 'null', 'NaN', 'Infinity'])

whitespace = re.compile(r"[ \t\r\n]+")
number = re.compile(r"-?([0-9]+)(\.[0-9]+)?([eE][+-]?[0-9]+)?")
identifier = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
temporal = re.compile(r"[0-9\-:.+TZPYMDHS]*")
regexp_flags = re.compile(r"[A-Za-z]*")
string_chunk = re.compile(r'[^"\\\x00-\x1f]+')
hex4 = re.compile(r"[0-9a-fA-F]{4}")

str_escapes = {
    '"': '"',
    '\\': '\\',
    '/': '/',
    'b': '\b',
    'f': '\f',
    'n': '\n',
    'r': '\r',
    't': '\t',
}


def tokenize(buf):
    pos = 0
    end = len(buf)
    while True:
        m = whitespace.match(buf, pos)
        if m:
            pos = m.end()

        if pos >= end:
            yield Token(EOF, None, pos, pos)
            return

        peek = buf[pos]

        if peek in punctuation:
            yield Token(peek, peek, pos, pos + 1)
            pos += 1

        elif peek == '=' and buf.startswith(ARROW, pos):
            yield Token(ARROW, ARROW, pos, pos + 2)
            pos += 2

        elif peek == '"':
            value, stop = read_string(buf, pos)
            yield Token(STRING, value, pos, stop)
            pos = stop

        elif peek == '-' and buf.startswith('-Infinity', pos):
            m = identifier.match(buf, pos + 1)
            if m.group() != 'Infinity':
                raise UnexpectedCharacter("Unknown identifier {}".format(repr(m.group())), buf, pos + 1)
            yield Token(KEYWORD, '-Infinity', pos, m.end())
            pos = m.end()

        elif peek == '-' or '0' <= peek <= '9':
            token = read_number(buf, pos)
            yield token
            pos = token.end

        elif peek == '@':
            m = temporal.match(buf, pos + 1)
            yield Token(TEMPORAL, m.group(), pos, m.end())
            pos = m.end()

        elif peek == '/':
            token = read_regexp(buf, pos)
            yield token
            pos = token.end

        elif peek in 'bx' and buf.startswith('"', pos + 1):
            stop = buf.find('"', pos + 2)
            if stop == -1:
                raise UnterminatedString("Unterminated binary literal", buf, pos)
            kind = BASE64 if peek == 'b' else HEX
            yield Token(kind, buf[pos + 2:stop], pos, stop + 1)
            pos = stop + 1

        else:
            m = identifier.match(buf, pos)
            if not m:
                raise UnexpectedCharacter("Unexpected character {}".format(repr(peek)), buf, pos)
            name = m.group()
            if name in keywords:
                yield Token(KEYWORD, name, pos, m.end())
                pos = m.end()
            elif name in ('Map', 'Set') and buf.startswith('{', m.end()):
                kind = MAP_OPEN if name == 'Map' else SET_OPEN
                yield Token(kind, kind, pos, m.end() + 1)
                pos = m.end() + 1
            else:
                raise UnexpectedCharacter("Unknown identifier {}".format(repr(name)), buf, pos)


def read_number(buf, pos):
    m = number.match(buf, pos)
    if not m:
        raise UnexpectedCharacter("Expected a digit after '-'", buf, pos + 1)
    stop = m.end()
    if buf.startswith('n', stop):
        # BigInt() decides if this is made of digits
        return Token(BIGINT, m.group(), pos, stop + 1)
    digits = m.group(1)
    if len(digits) > 1 and digits[0] == '0':
        raise UnexpectedCharacter("Leading zeros are not allowed", buf, m.start(1))
    return Token(NUMBER, m.group(), pos, stop)


def read_string(buf, pos):
    out = []
    lo = pos + 1  # skip quote
    end = len(buf)
    while True:
        m = string_chunk.match(buf, lo)
        if m:
            out.append(m.group())
            lo = m.end()

        if lo >= end:
            raise UnterminatedString("Unterminated string", buf, pos)

        c = buf[lo]
        if c == '"':
            return "".join(out), lo + 1

        if c != '\\':
            raise UnexpectedCharacter("Unescaped control character {} in string".format(repr(c)), buf, lo)

        esc = buf[lo + 1:lo + 2]
        if not esc:
            raise UnterminatedString("Unterminated string", buf, pos)
        if esc in str_escapes:
            out.append(str_escapes[esc])
            lo += 2
        elif esc == 'u':
            n = read_hex4(buf, lo)
            lo += 6
            if 0xD800 <= n <= 0xDBFF and buf.startswith('\\u', lo):
                low = read_hex4(buf, lo)
                if 0xDC00 <= low <= 0xDFFF:
                    n = 0x10000 + ((n - 0xD800) << 10) + (low - 0xDC00)
                    lo += 6
            out.append(chr(n))
        else:
            raise InvalidEscape("Invalid escape sequence {}".format(repr('\\' + esc)), buf, lo)


def read_hex4(buf, lo):
    m = hex4.match(buf, lo + 2)
    if not m:
        raise InvalidEscape("Invalid unicode escape {}".format(repr(buf[lo:lo + 6])), buf, lo)
    return int(m.group(), 16)


def read_regexp(buf, pos):
    lo = pos + 1
    end = len(buf)
    i = lo
    while i < end:
        c = buf[i]
        if c == '\\':
            i += 2
        elif c == '/':
            break
        elif c in '\r\n':
            raise UnterminatedString("Unterminated regular expression", buf, pos)
        else:
            i += 1
    if i >= end:
        raise UnterminatedString("Unterminated regular expression", buf, pos)
    m = regexp_flags.match(buf, i + 1)
    return Token(REGEXP, (buf[lo:i], m.group()), pos, m.end())
