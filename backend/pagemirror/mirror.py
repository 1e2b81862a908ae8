"""
Mirror orchestration: validate -> render (first iframe if any) -> rewrite
resource URLs -> persist under a fresh code.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable
from urllib.parse import urljoin

from pagemirror.banner import inject_banner
from pagemirror.errors import FetchFailed, InvalidCode, MirrorError, MissingParameter, NotFound, UnsafeUrl
from pagemirror.renderer import open_browser_session
from pagemirror.rewriter import process_resource_urls
from pagemirror.store import ContentStore, PageRecord, generate_code, is_valid_code, utc_timestamp
from pagemirror.url_safety import is_url_safe


@dataclass
class MirrorResult:
    code: str
    frame_url: str | None
    preview_url: str


async def _follow_first_frame(session, url: str, html: str) -> tuple[str, str]:
    """
    If the loaded page has an iframe with a safe src, render that instead.
    Returns (final_url, html). Any failure here keeps the main page.
    """
    sources = await session.frame_sources()
    if not sources:
        return url, html

    print(f"[mirror] Found {len(sources)} iframe(s), using the first")
    src = sources[0]
    if not src:
        return url, html

    try:
        frame_url = urljoin(url, src)
        print(f"[mirror] iframe URL: {frame_url}")
        if not is_url_safe(frame_url):
            return url, html
        frame_html = await session.navigate(frame_url)
    except Exception as e:
        print(f"[mirror] iframe load failed, keeping main page: {e}")
        return url, html

    print("[mirror] Loaded iframe content")
    return frame_url, frame_html


async def create_mirror(
    raw_url: str | None,
    store: ContentStore,
    open_session=open_browser_session,
    preview_url_for: Callable[[str], str] | None = None,
) -> MirrorResult:
    """
    Render `raw_url` and store the rewritten page under a new code.

    Raises MissingParameter / UnsafeUrl before any browser work, and
    FetchFailed for anything that goes wrong afterwards.
    """
    if not raw_url:
        raise MissingParameter()
    if not is_url_safe(raw_url):
        raise UnsafeUrl()

    try:
        async with open_session() as session:
            print(f"[mirror] Visiting {raw_url}")
            html = await session.navigate(raw_url)
            final_url, html = await _follow_first_frame(session, raw_url, html)

        content = process_resource_urls(html, final_url)
        code = generate_code()
        record = PageRecord(
            code=code,
            original_url=raw_url,
            final_url=final_url,
            frame_url=final_url if final_url != raw_url else None,
            content=content,
            timestamp=utc_timestamp(),
        )
        await asyncio.to_thread(store.save, code, record)
    except MirrorError:
        raise
    except Exception as e:
        print(f"[mirror] Fetch failed for {raw_url}: {e}")
        raise FetchFailed(str(e)) from e

    print(f"[mirror] Saved page, code: {code}")
    preview_url = preview_url_for(code) if preview_url_for else f"/{code}"
    return MirrorResult(code=code, frame_url=record.frame_url, preview_url=preview_url)


async def render_mirror_page(code: str, store: ContentStore) -> str:
    """Stored page for `code` with the mirror header injected."""
    if not is_valid_code(code):
        raise InvalidCode()
    record = await asyncio.to_thread(store.load, code)
    if record is None:
        raise NotFound()
    return inject_banner(record.content)
