from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from pagemirror.config import get_settings
from pagemirror.errors import InvalidCode, MirrorError, NotFound
from pagemirror.mirror import create_mirror, render_mirror_page
from pagemirror.renderer import open_browser_session
from pagemirror.store import ContentStore, utc_timestamp
from pagemirror.templates import INDEX_HTML


@lru_cache()
def get_store() -> ContentStore:
    return ContentStore(get_settings().content_dir)


def get_session_factory():
    return open_browser_session


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure the content directory exists
    store = get_store()
    store.ensure_root()
    print(f"[startup] Page mirror serving content from {store.root}")
    yield


app = FastAPI(title="Page Mirror", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MirrorError)
async def mirror_error_handler(request: Request, exc: MirrorError):
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/", response_class=HTMLResponse)
def root():
    return HTMLResponse(INDEX_HTML)


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": utc_timestamp()}


@app.get("/fetch")
async def fetch_page(
    request: Request,
    u: str | None = None,
    store: ContentStore = Depends(get_store),
    open_session=Depends(get_session_factory),
):
    """Render a page (or its first iframe) and store it under a new code."""
    result = await create_mirror(
        u,
        store,
        open_session=open_session,
        preview_url_for=lambda code: str(request.url_for("show_mirror", code=code)),
    )
    return {
        "code": result.code,
        "iframe_url": result.frame_url,
        "preview_url": result.preview_url,
    }


@app.get("/{code}", response_class=HTMLResponse)
async def show_mirror(code: str, store: ContentStore = Depends(get_store)):
    """Serve a stored page with the mirror header."""
    try:
        html = await render_mirror_page(code, store)
    except (InvalidCode, NotFound) as e:
        return HTMLResponse(f"<h1>{e.message}</h1>", status_code=e.status_code)
    return HTMLResponse(html)


def run():
    import uvicorn

    settings = get_settings()
    print(f"[startup] Listening on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
