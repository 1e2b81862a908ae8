import tempfile
import unittest
from contextlib import asynccontextmanager
from unittest.mock import patch

from fakes import FakeSession, FakeSessionFactory
from pagemirror.banner import MIRROR_HEADER
from pagemirror.errors import FetchFailed, InvalidCode, MissingParameter, NotFound, UnsafeUrl
from pagemirror.mirror import create_mirror, render_mirror_page
from pagemirror.store import ContentStore

MAIN_URL = "https://example.com/docs/page"
MAIN_HTML = '<html><body><img src="img/logo.png"></body></html>'


class TestCreateMirror(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = ContentStore(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    async def test_missing_url(self):
        for value in (None, ""):
            with self.assertRaises(MissingParameter):
                await create_mirror(value, self.store)

    async def test_unsafe_url_never_opens_a_session(self):
        factory = FakeSessionFactory(FakeSession({}))
        with self.assertRaises(UnsafeUrl):
            await create_mirror("http://127.0.0.1/admin", self.store, open_session=factory)
        self.assertEqual(factory.opened, 0)

    async def test_page_without_frames(self):
        factory = FakeSessionFactory(FakeSession({MAIN_URL: MAIN_HTML}))
        result = await create_mirror(MAIN_URL, self.store, open_session=factory)

        self.assertRegex(result.code, r"^[a-f0-9]{12}$")
        self.assertIsNone(result.frame_url)
        self.assertEqual(result.preview_url, f"/{result.code}")
        self.assertEqual(factory.closed, 1)

        record = self.store.load(result.code)
        self.assertEqual(record.original_url, MAIN_URL)
        self.assertEqual(record.final_url, MAIN_URL)
        self.assertIsNone(record.frame_url)
        self.assertIn('src="https://example.com/docs/img/logo.png"', record.content)
        self.assertNotIn('src="img/logo.png"', record.content)

    async def test_first_frame_is_followed(self):
        frame_url = "https://example.com/embed/view.html"
        session = FakeSession(
            {MAIN_URL: MAIN_HTML, frame_url: '<body><script src="app.js"></script></body>'},
            frames=["../embed/view.html", "https://other.com/second"],
        )
        result = await create_mirror(
            MAIN_URL,
            self.store,
            open_session=FakeSessionFactory(session),
            preview_url_for=lambda code: f"http://testserver/{code}",
        )

        self.assertEqual(session.visited, [MAIN_URL, frame_url])
        self.assertEqual(result.frame_url, frame_url)
        self.assertEqual(result.preview_url, f"http://testserver/{result.code}")
        record = self.store.load(result.code)
        self.assertEqual(record.final_url, frame_url)
        self.assertIn('src="https://example.com/embed/app.js"', record.content)

    async def test_failed_frame_falls_back_to_main_page(self):
        frame_url = "https://example.com/docs/frame"
        session = FakeSession({MAIN_URL: MAIN_HTML}, frames=["frame"], failing=[frame_url])
        factory = FakeSessionFactory(session)
        result = await create_mirror(MAIN_URL, self.store, open_session=factory)

        self.assertIsNone(result.frame_url)
        record = self.store.load(result.code)
        self.assertEqual(record.final_url, MAIN_URL)
        self.assertIn("https://example.com/docs/img/logo.png", record.content)
        self.assertEqual(factory.closed, 1)

    async def test_unsafe_frame_is_ignored(self):
        session = FakeSession({MAIN_URL: MAIN_HTML}, frames=["http://192.168.0.1/router"])
        result = await create_mirror(MAIN_URL, self.store, open_session=FakeSessionFactory(session))
        self.assertEqual(session.visited, [MAIN_URL])
        self.assertIsNone(result.frame_url)

    async def test_frame_without_src_is_ignored(self):
        session = FakeSession({MAIN_URL: MAIN_HTML}, frames=[None])
        result = await create_mirror(MAIN_URL, self.store, open_session=FakeSessionFactory(session))
        self.assertEqual(session.visited, [MAIN_URL])
        self.assertIsNone(result.frame_url)

    async def test_frame_pointing_at_same_url_has_no_frame_url(self):
        session = FakeSession({MAIN_URL: MAIN_HTML}, frames=[MAIN_URL])
        result = await create_mirror(MAIN_URL, self.store, open_session=FakeSessionFactory(session))
        self.assertIsNone(result.frame_url)

    async def test_navigation_failure_is_fetch_failed_and_session_closed(self):
        factory = FakeSessionFactory(FakeSession({}, failing=[MAIN_URL]))
        with self.assertRaises(FetchFailed) as cm:
            await create_mirror(MAIN_URL, self.store, open_session=factory)
        self.assertIn("Timeout", cm.exception.details)
        self.assertEqual(cm.exception.to_dict()["error"], "Page fetch failed")
        self.assertEqual(factory.closed, 1)

    async def test_session_launch_failure_is_fetch_failed(self):
        @asynccontextmanager
        async def broken():
            raise RuntimeError("Executable doesn't exist")
            yield

        with self.assertRaises(FetchFailed) as cm:
            await create_mirror(MAIN_URL, self.store, open_session=broken)
        self.assertEqual(cm.exception.details, "Executable doesn't exist")

    async def test_store_write_failure_is_fetch_failed(self):
        factory = FakeSessionFactory(FakeSession({MAIN_URL: MAIN_HTML}))
        with patch.object(self.store, "save", side_effect=PermissionError("read-only")):
            with self.assertRaises(FetchFailed):
                await create_mirror(MAIN_URL, self.store, open_session=factory)


class TestRenderMirrorPage(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = ContentStore(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    async def test_invalid_code(self):
        for code in ("short", "ABCDEF012345", "abcdef0123456", "../../etc/pw"):
            with self.assertRaises(InvalidCode):
                await render_mirror_page(code, self.store)

    async def test_unknown_code(self):
        with self.assertRaises(NotFound):
            await render_mirror_page("abcdef012345", self.store)

    async def test_banner_injected(self):
        factory = FakeSessionFactory(FakeSession({MAIN_URL: MAIN_HTML}))
        result = await create_mirror(MAIN_URL, self.store, open_session=factory)
        html = await render_mirror_page(result.code, self.store)
        self.assertTrue(html.startswith("<html><body>" + MIRROR_HEADER))


if __name__ == "__main__":
    unittest.main()
