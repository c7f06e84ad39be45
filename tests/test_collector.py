"""Tests for server.collector -- incremental upload consumption."""

import asyncio
import unittest

from client.errors import SpeedtestError
from server.errors import PayloadTooLarge, ServerError, StreamFailure
from server.collector import UploadCollector


async def _chunks(*parts, error=None):
    for part in parts:
        await asyncio.sleep(0)
        yield part
    if error is not None:
        raise error


class TestUploadCollector(unittest.IsolatedAsyncioTestCase):
    async def test_zero_chunks(self):
        c = UploadCollector()
        total = await c.consume(_chunks())
        self.assertEqual(total, 0)
        self.assertEqual(c.chunk_count, 0)
        self.assertTrue(c.finished)

    async def test_counts_all_chunks(self):
        c = UploadCollector()
        total = await c.consume(_chunks(b"a" * 10, b"b" * 20, b"c" * 30))
        self.assertEqual(total, 60)
        self.assertEqual(c.chunk_count, 3)
        self.assertTrue(c.finished)

    async def test_chunking_does_not_change_total(self):
        data = bytes(range(256)) * 40
        one = UploadCollector()
        many = UploadCollector()
        await one.consume(_chunks(data))
        await many.consume(_chunks(*[data[i:i + 7] for i in range(0, len(data), 7)]))
        self.assertEqual(one.bytes_received, many.bytes_received)

    async def test_stream_error_is_typed(self):
        c = UploadCollector()
        with self.assertRaises(StreamFailure) as ctx:
            await c.consume(_chunks(b"x" * 5, error=ConnectionResetError("Connection lost")))
        self.assertIn("Connection lost", str(ctx.exception))
        self.assertFalse(c.finished)
        self.assertEqual(c.bytes_received, 5)

    async def test_eof_error_is_typed(self):
        c = UploadCollector()
        with self.assertRaises(StreamFailure):
            await c.consume(_chunks(error=asyncio.IncompleteReadError(b"", 10)))

    async def test_limit_enforced(self):
        c = UploadCollector(limit=15)
        with self.assertRaises(PayloadTooLarge):
            await c.consume(_chunks(b"x" * 10, b"x" * 10, b"x" * 10))
        self.assertFalse(c.finished)
        self.assertEqual(c.chunk_count, 2)

    async def test_limit_exact_is_accepted(self):
        c = UploadCollector(limit=20)
        self.assertEqual(await c.consume(_chunks(b"x" * 10, b"x" * 10)), 20)

    async def test_zero_limit_means_unbounded(self):
        c = UploadCollector(limit=0)
        self.assertEqual(await c.consume(_chunks(b"x" * 1000)), 1000)


class TestServerErrors(unittest.TestCase):
    def test_not_client_phase_failures(self):
        for cls in (StreamFailure, PayloadTooLarge):
            with self.subTest(cls=cls.__name__):
                self.assertTrue(issubclass(cls, ServerError))
                self.assertFalse(issubclass(cls, SpeedtestError))

    def test_payload_too_large_message(self):
        exc = PayloadTooLarge(100)
        self.assertEqual(exc.limit, 100)
        self.assertEqual(str(exc), "Upload exceeds limit of 100 bytes")


if __name__ == "__main__":
    unittest.main()
