"""
    Codec: the entry points, holding the limits applied to each call
"""
from logging import getLogger

from .errors import RDNError, UnexpectedCharacter, NestingTooDeep
from .parser import Parser
from .serializer import Serializer

logger = getLogger(__name__)

CONTENT_TYPE = "application/rdn"


class Codec:
    content_type = CONTENT_TYPE

    def __init__(self, max_depth=None, max_binary_size=None):
        self.max_depth = max_depth
        self.max_binary_size = max_binary_size

    def parse(self, buf, transform=None):
        if isinstance(buf, (bytes, bytearray, memoryview)):
            buf = self.decode(bytes(buf))
        parser = Parser(buf, transform=transform,
                max_depth=self.max_depth, max_binary_size=self.max_binary_size)
        try:
            return parser.parse()
        except RecursionError as e:
            err = NestingTooDeep("Nesting too deep for the interpreter's recursion limit", buf, 0)
            logger.debug("parse failed: %s", err)
            raise err from e
        except RDNError as e:
            logger.debug("parse failed: %s", e)
            raise

    def decode(self, buf):
        try:
            return buf.decode('utf-8')
        except UnicodeDecodeError as e:
            err = UnexpectedCharacter("Invalid UTF-8: {}".format(e.reason), None, e.start)
            logger.debug("parse failed: %s", err)
            raise err from e

    def dump(self, obj, transform=None):
        return self.run_dump(Serializer(transform).dump, obj)

    def dump_rdn(self, obj, buf, transform=None):
        self.run_dump(Serializer(transform).dump_rdn, obj, buf)

    def run_dump(self, fn, *args):
        try:
            return fn(*args)
        except RecursionError as e:
            err = NestingTooDeep("Nesting too deep for the interpreter's recursion limit")
            logger.debug("dump failed: %s", err)
            raise err from e
        except RDNError as e:
            logger.debug("dump failed: %s", e)
            raise
