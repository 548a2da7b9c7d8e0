import io
import unittest

import rdn

from rdn.errors import RDNError, ParseError, UnexpectedEof, CyclicStructure, SerializeError


class CodecTest(unittest.TestCase):
    def test_content_type(self):
        self.assertEqual(rdn.CONTENT_TYPE, "application/rdn")
        self.assertEqual(rdn.Codec().content_type, rdn.CONTENT_TYPE)

    def test_independent_codecs(self):
        strict = rdn.Codec(max_depth=1)
        self.assertEqual(strict.parse('[1]'), [1.0])
        self.assertEqual(rdn.parse('[[[1]]]'), [[[1.0]]])

    def test_error_hierarchy(self):
        with self.assertRaises(ParseError):
            rdn.parse('[')
        with self.assertRaises(ValueError):
            rdn.parse('[')
        a = []
        a.append(a)
        with self.assertRaises(SerializeError):
            rdn.dump(a)

    def test_logs_failures(self):
        with self.assertLogs('rdn', level='DEBUG') as cm:
            with self.assertRaises(UnexpectedEof):
                rdn.parse('{"a": [1, 2')
        self.assertIn("parse failed", cm.output[0])
        self.assertIn("pos=11", cm.output[0])

        a = [1]
        a.append([a])
        with self.assertLogs('rdn', level='DEBUG') as cm:
            with self.assertRaises(CyclicStructure):
                rdn.dump_rdn(a, io.StringIO())
        self.assertIn("dump failed", cm.output[0])

    def test_error_fields(self):
        try:
            rdn.parse('{"a"\n: 1, ]')
        except RDNError as e:
            self.assertEqual(e.kind, "InvalidObjectKey")
            self.assertEqual(e.pos, 10)
            self.assertEqual((e.lineno, e.colno), (2, 6))
            self.assertEqual(e.reason, "Object keys must be strings, found ']'")
        else:
            self.fail("no error raised")

    def test_tokenize_exported(self):
        self.assertEqual([t.kind for t in rdn.tokenize('[]')], ['[', ']', 'eof'])
