"""
    everything that can go wrong reading or writing RDN

    errors raised by value constructors have no position, the parser
    locates them against the input before letting them escape
"""

class RDNError(ValueError):
    """
        pos is a character offset into the text, byte_offset the same
        place counted in UTF-8 bytes
    """
    def __init__(self, reason, buf=None, pos=None):
        ValueError.__init__(self, reason)
        self.reason = reason
        self.buf = buf
        self.pos = pos

    @property
    def kind(self):
        return self.__class__.__name__

    def locate(self, buf, pos):
        if self.pos is None:
            self.buf = buf
            self.pos = pos
        return self

    @property
    def lineno(self):
        if self.pos is None or self.buf is None:
            return None
        return self.buf.count('\n', 0, self.pos) + 1

    @property
    def colno(self):
        if self.pos is None or self.buf is None:
            return None
        return self.pos - self.buf.rfind('\n', 0, self.pos)

    @property
    def byte_offset(self):
        if self.pos is None or self.buf is None:
            return self.pos
        return len(self.buf[:self.pos].encode('utf-8', 'surrogatepass'))

    def __str__(self):
        if self.pos is None:
            return self.reason
        if self.buf is None:
            return "{} (at pos={})".format(self.reason, self.pos)
        return "{} (at line {}, column {}, pos={})".format(self.reason, self.lineno, self.colno, self.pos)

# Lexical: the text isn't made of tokens

class LexError(RDNError): pass
class UnexpectedCharacter(LexError): pass
class UnterminatedString(LexError): pass
class InvalidEscape(LexError): pass

# Syntactic: the tokens aren't in order

class ParseError(RDNError): pass
class UnexpectedToken(ParseError): pass
class UnexpectedEof(ParseError): pass
class TrailingInput(ParseError): pass
class InvalidObjectKey(ParseError): pass
class NestingTooDeep(ParseError): pass

# Semantic: a literal is well formed but not a valid value

class ValidationError(RDNError): pass
class InvalidBigInt(ValidationError): pass
class InvalidTimeOnly(ValidationError): pass
class InvalidRegExpFlags(ValidationError): pass
class InvalidRegExpSource(ValidationError): pass
class InvalidTemporalLiteral(ValidationError): pass
class InvalidDate(ValidationError): pass
class InvalidBase64(ValidationError): pass
class InvalidHex(ValidationError): pass
class BinaryTooLarge(ValidationError): pass

# Writing

class SerializeError(RDNError): pass
class CyclicStructure(SerializeError): pass
