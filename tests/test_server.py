"""Tests for server.app -- ping, download and upload endpoints."""

import asyncio
import os
import tempfile
import unittest
from pathlib import Path

from aiohttp.test_utils import AioHTTPTestCase, make_mocked_request

from server.app import SpeedtestHandlers, create_app
from server.config import ServerConfig


ASSET_SIZE = 64 * 1024


class _ServerTestCase(AioHTTPTestCase):
    """Real app over a temporary download directory holding one asset."""

    upload_limit = 1024 * 1024

    async def get_application(self):
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.download_dir = root / "download_files"
        self.download_dir.mkdir()
        (self.download_dir / "asset.bin").write_bytes(os.urandom(ASSET_SIZE))
        (root / "secret").write_bytes(b"top secret")
        self.config = ServerConfig(
            download_dir=self.download_dir,
            public_dir=None,
            upload_limit=self.upload_limit,
        )
        return create_app(self.config)

    async def asyncTearDown(self):
        await super().asyncTearDown()
        self._tmp.cleanup()


class TestPing(_ServerTestCase):
    async def test_ping_empty_no_store(self):
        async with self.client.get("/api/ping", params={"t": "123"}) as resp:
            self.assertEqual(resp.status, 200)
            self.assertEqual(resp.headers["Cache-Control"], "no-store")
            self.assertEqual(await resp.read(), b"")

    async def test_ping_without_token(self):
        async with self.client.get("/api/ping") as resp:
            self.assertEqual(resp.status, 200)

    async def test_cors_header(self):
        async with self.client.get("/api/ping") as resp:
            self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")

    async def test_preflight(self):
        async with self.client.options("/api/upload") as resp:
            self.assertEqual(resp.status, 204)
            self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")


class TestDownload(_ServerTestCase):
    async def test_download_full_body(self):
        async with self.client.get("/api/download/asset.bin", params={"t": "1"}) as resp:
            self.assertEqual(resp.status, 200)
            self.assertEqual(resp.headers["Cache-Control"], "no-store")
            body = await resp.read()
        self.assertEqual(len(body), ASSET_SIZE)
        self.assertEqual(body, (self.download_dir / "asset.bin").read_bytes())

    async def test_missing_asset_404(self):
        async with self.client.get("/api/download/nope.bin") as resp:
            self.assertEqual(resp.status, 404)
            self.assertEqual(await resp.text(), "File not found.")

    async def test_traversal_rejected_400(self):
        handlers = SpeedtestHandlers(self.config)
        request = make_mocked_request(
            "GET", "/api/download/..%2Fsecret", match_info={"filename": "../secret"}
        )
        resp = await handlers.download(request)
        self.assertEqual(resp.status, 400)
        self.assertEqual(resp.text, "Invalid filename.")

    async def test_dotdot_inside_name_rejected(self):
        async with self.client.get("/api/download/a..b") as resp:
            self.assertEqual(resp.status, 400)


class TestUpload(_ServerTestCase):
    async def test_upload_acknowledged(self):
        data = os.urandom(200_000)
        async with self.client.post("/api/upload", params={"t": "9"}, data=data) as resp:
            self.assertEqual(resp.status, 200)
            self.assertEqual(resp.headers["Cache-Control"], "no-store")
            self.assertEqual(await resp.read(), b"")

    async def test_chunked_upload(self):
        async def chunks():
            for _ in range(10):
                yield b"x" * 1000

        async with self.client.post("/api/upload", data=chunks()) as resp:
            self.assertEqual(resp.status, 200)

    async def test_empty_upload(self):
        async with self.client.post("/api/upload", data=b"") as resp:
            self.assertEqual(resp.status, 200)

    async def test_oversized_upload_rejected(self):
        data = b"\0" * (self.upload_limit + 1)
        async with self.client.post("/api/upload", data=data) as resp:
            self.assertEqual(resp.status, 413)
            self.assertNotIn("Cache-Control", resp.headers)


class _BrokenPayload:
    """Request body that delivers some bytes and then loses the connection."""

    def __init__(self):
        self.chunks_served = 0

    async def _gen(self):
        yield b"a" * 1024
        self.chunks_served += 1
        yield b"b" * 1024
        self.chunks_served += 1
        raise ConnectionResetError("Connection lost")

    def iter_any(self):
        return self._gen()


class TestUploadStreamError(unittest.IsolatedAsyncioTestCase):
    async def test_stream_error_returns_500(self):
        handlers = SpeedtestHandlers(ServerConfig(public_dir=None))
        payload = _BrokenPayload()
        request = make_mocked_request("POST", "/api/upload", payload=payload)

        resp = await handlers.upload(request)

        self.assertEqual(payload.chunks_served, 2)
        self.assertEqual(resp.status, 500)
        self.assertEqual(resp.text, "Upload stream error")
        self.assertNotIn("Cache-Control", resp.headers)


class _DisconnectingPayload:
    """One chunk, then the cancellation aiohttp delivers on client disconnect."""

    async def _gen(self):
        yield b"c" * 100000
        raise asyncio.CancelledError()

    def iter_any(self):
        return self._gen()


class TestUploadClientDisconnect(unittest.IsolatedAsyncioTestCase):
    async def test_disconnect_is_logged_and_propagated(self):
        handlers = SpeedtestHandlers(ServerConfig(public_dir=None))
        request = make_mocked_request("POST", "/api/upload", payload=_DisconnectingPayload())

        with self.assertLogs("server.app", level="WARNING") as logs:
            with self.assertRaises(asyncio.CancelledError):
                await handlers.upload(request)

        self.assertIn("aborted by client after 100000 bytes", "\n".join(logs.output))


if __name__ == "__main__":
    unittest.main()
