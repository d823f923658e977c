"""FastAPI application: health, session/catalog API, kiosk page, and WebSocket endpoint.

Run via ``python main.py --serve`` (starts uvicorn + orchestrator in one process).
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from config import settings
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from server.bridge import bridge

logger = logging.getLogger(__name__)

# Optional built kiosk front-end (web/)
_WEB_DIR = Path(settings.PROJECT_ROOT) / "web"


# ── Lifespan ──────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log start and stop; the orchestrator binds itself to the bridge."""
    logger.info("Kiosk server started on %s:%s (ws %s)",
                settings.KIOSK_SERVE_HOST, settings.KIOSK_SERVE_PORT, settings.KIOSK_WS_PATH)
    yield
    logger.info("Kiosk server shutting down")


app = FastAPI(
    title="Kiosk Avatar API",
    version="1.0.0",
    lifespan=lifespan,
)

# Kiosk page may be served from another origin on the same LAN
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Health / readiness ────────────────────────────────────────────────────

@app.get("/health")
async def health():
    """Liveness plus whether a session is bound and who is connected."""
    return {
        "status": "ok",
        "session": bridge.orchestrator is not None,
        "clients": bridge.client_count,
        "heygen": settings.heygen_enabled(),
    }


# ── Session / catalog ─────────────────────────────────────────────────────

@app.get("/api/session")
async def api_session():
    """Current SessionState snapshot (phase, background, pending module)."""
    orchestrator = bridge.orchestrator
    if orchestrator is None:
        return JSONResponse({"error": "No session running"}, status_code=503)
    return {"session": orchestrator.snapshot()}


@app.get("/api/catalog")
async def api_catalog():
    """Modules and topics for the kiosk menus."""
    orchestrator = bridge.orchestrator
    if orchestrator is None:
        return JSONResponse({"error": "No session running"}, status_code=503)
    return orchestrator.catalog.menu()


@app.get("/api/avatar")
async def api_avatar():
    """Streaming avatar connection (LiveKit url + access token) for the kiosk page."""
    if bridge.avatar_session is None:
        return JSONResponse({"error": "No avatar stream; the page speaks itself"}, status_code=404)
    return bridge.avatar_session


# ── WebSocket ─────────────────────────────────────────────────────────────

@app.websocket(settings.KIOSK_WS_PATH)
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    if bridge.avatar_session is not None:
        await ws.send_json({"type": "avatar_session", **bridge.avatar_session})
    bridge.add_client(ws)
    orchestrator = bridge.orchestrator
    if orchestrator is not None:
        # Late joiners get the current phase so the page can render the right overlay
        await ws.send_json({"type": "status", "status": orchestrator.state.phase.value})
    try:
        while True:
            raw = await ws.receive_text()
            await bridge.handle_client_message(raw)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.debug("WS error: %s", e)
    finally:
        bridge.remove_client(ws)


# ── Kiosk page (must be last) ─────────────────────────────────────────────

if _WEB_DIR.is_dir():
    _assets_dir = _WEB_DIR / "assets"
    if _assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=str(_assets_dir)), name="kiosk-assets")

    @app.get("/")
    async def kiosk_index():
        return FileResponse(_WEB_DIR / "index.html", media_type="text/html")
else:
    logger.debug("Kiosk page not found at %s; serving API only", _WEB_DIR)
