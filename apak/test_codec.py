from __future__ import annotations

import io
import random
import unittest
import zlib

from apak.codec import Codec, compress, decompress, obfuscate
from apak.constants import BLOCK_SIZE, FOOTER_MAGIC, FOOTER_STRUCT, XOR_KEY
from apak.errors import BoundsError, FormatError
from apak.header import pack_header, read_header
from apak.model import Block, ChunkLayout
from apak.records import check_block_bounds
from apak.result import Result
from apak.trailer import dumps_index, loads_index, read_footer


class CodecTests(unittest.TestCase):
    def test_obfuscate_is_self_inverse(self):
        rng = random.Random(99)
        for n in (0, 1, 255, 4096):
            data = rng.randbytes(n)
            self.assertEqual(data, obfuscate(obfuscate(data)))
        self.assertEqual(bytes(range(256)), obfuscate(obfuscate(bytes(range(256)))))

    def test_obfuscate_xors_each_byte(self):
        self.assertEqual(bytes([0x00 ^ XOR_KEY, 0xFF ^ XOR_KEY]), obfuscate(b"\x00\xff"))

    def test_compress_is_raw_deflate(self):
        data = b"hello world\n" * 100
        packed = compress(data)
        self.assertLess(len(packed), len(data))
        # No zlib header: a raw inflater reads it directly
        self.assertEqual(data, zlib.decompress(packed, -15))
        self.assertEqual(data, decompress(packed))

    def test_block_roundtrip(self):
        codec = Codec()
        raw = random.Random(5).randbytes(10_000)
        stored = codec.encode_block(raw)
        self.assertEqual(stored, obfuscate(compress(raw)))
        self.assertEqual(raw, codec.decode_block(stored).unwrap())

    def test_decode_rejects_garbage(self):
        codec = Codec()
        self.assertTrue(codec.decode_block(b"").failed)
        truncated = codec.encode_block(b"hello " * 200)[:-3]
        res = codec.decode_block(truncated)
        self.assertTrue(res.failed)
        self.assertIsInstance(res.error, FormatError)

    def test_decode_stops_at_recorded_size(self):
        codec = Codec()
        stored = codec.encode_block(b"\0" * (4 * BLOCK_SIZE))
        res = codec.decode_block(stored, max_size=1)
        self.assertTrue(res.failed)
        self.assertIsInstance(res.error, FormatError)
        self.assertIn("block size mismatch", str(res.error))
        self.assertEqual(b"abc", codec.decode_block(codec.encode_block(b"abc"), max_size=3).unwrap())

    def test_decompress_limit(self):
        data = compress(b"z" * 1000)
        self.assertEqual(b"z" * 1000, decompress(data, 1000))
        with self.assertRaises(OverflowError):
            decompress(data, 999)
        self.assertEqual(b"", decompress(compress(b""), 0))


class ResultTests(unittest.TestCase):
    def test_ok_and_fail(self):
        self.assertEqual(3, Result.ok(3).unwrap())
        self.assertEqual(6, Result.ok(3).map(lambda v: v * 2).unwrap())
        err = FormatError("bad")
        failed = Result.fail(err)
        self.assertTrue(failed.failed)
        self.assertIs(err, failed.map(lambda v: v).error)
        with self.assertRaises(FormatError):
            failed.unwrap()

    def test_failed_result_cannot_carry_value(self):
        with self.assertRaises(ValueError):
            Result(value=1, error=FormatError("x"))


class HeaderTrailerTests(unittest.TestCase):
    def test_header_roundtrip(self):
        hdr = read_header(io.BytesIO(pack_header(5))).unwrap()
        self.assertEqual(1, hdr.version)
        self.assertEqual(5, hdr.chunk_count)

    def test_header_negative_count(self):
        self.assertTrue(read_header(io.BytesIO(pack_header(-1))).failed)

    def test_index_roundtrip(self):
        layouts = [
            ChunkLayout("a.txt", 3, [Block(12, 5, 3)]),
            ChunkLayout("dir/é.bin", 0, []),
        ]
        data = dumps_index(layouts)
        self.assertEqual(layouts, loads_index(data, 2).unwrap())

    def test_index_truncated(self):
        data = dumps_index([ChunkLayout("a.txt", 3, [Block(12, 5, 3)])])
        for cut in (2, 8, len(data) - 1):
            res = loads_index(data[:cut], 1)
            self.assertIsInstance(res.error, FormatError)

    def test_index_rejects_oversized_block(self):
        data = dumps_index([ChunkLayout("a", BLOCK_SIZE + 1, [Block(12, 5, BLOCK_SIZE + 1)])])
        self.assertTrue(loads_index(data, 1).failed)

    def test_index_rejects_size_sum_mismatch(self):
        data = dumps_index([ChunkLayout("a", 10, [Block(12, 5, 3)])])
        self.assertTrue(loads_index(data, 1).failed)

    def test_footer(self):
        body = pack_header(0) + FOOTER_STRUCT.pack(12, FOOTER_MAGIC)
        self.assertEqual(12, read_footer(io.BytesIO(body), len(body)).unwrap())
        bad = pack_header(0) + FOOTER_STRUCT.pack(12, 0)
        self.assertIsInstance(read_footer(io.BytesIO(bad), len(bad)).error, FormatError)
        oob = pack_header(0) + FOOTER_STRUCT.pack(400, FOOTER_MAGIC)
        self.assertIsInstance(read_footer(io.BytesIO(oob), len(oob)).error, BoundsError)

    def test_block_bounds(self):
        self.assertFalse(check_block_bounds(Block(12, 10, 4), 100).failed)
        self.assertIn("offset", str(check_block_bounds(Block(100, 1, 1), 100).error))
        self.assertIn("offset", str(check_block_bounds(Block(-1, 1, 1), 100).error))
        self.assertIn("length", str(check_block_bounds(Block(95, 10, 1), 100).error))


if __name__ == "__main__":
    unittest.main()
