"""Caption service API endpoints."""

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from services.captions.drivers import load_provider
from services.captions.errors import (
    FormatError,
    ProviderError,
    SessionNotFoundError,
    ValidationError,
)
from services.captions.serializer import TRACK_FORMATS
from services.captions.session import CaptionSession, session_manager
from services.captions.synchronizer import TickResult
from shared.models import (
    APIResponse,
    SeekResponse,
    SessionCreateRequest,
    SessionResponse,
    TickRequest,
    TickResponse,
    TrackFormat,
    TrackImportRequest,
    TranscriptItem,
)
from shared.utils import config, setup_logging

logger = setup_logging("caption-service")

app = FastAPI(
    title="Caption Service",
    description="Caption track synchronization, export and import",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(e: Exception) -> HTTPException:
    """Map caption engine errors onto HTTP errors."""
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, IndexError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, FormatError):
        return HTTPException(
            status_code=422,
            detail={"error": "FormatError", "message": str(e), "block": e.block},
        )
    if isinstance(e, ValidationError):
        return HTTPException(
            status_code=422,
            detail={"error": "ValidationError", "message": str(e), "position": e.position},
        )
    if isinstance(e, ProviderError):
        return HTTPException(status_code=502, detail=f"Caption provider failed: {e!s}")
    logger.error(f"Caption service failure: {e}")
    return HTTPException(status_code=500, detail=f"Caption service failed: {e!s}")


def _session_response(session: CaptionSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        cue_count=len(session.store),
        duration=session.store.duration,
        cues=session.transcript(),
    )


def _tick_response(session: CaptionSession, result: TickResult) -> TickResponse:
    return TickResponse(
        position=result.position,
        state=result.state,
        active_index=result.active_index,
        active_cue=session.synchronizer.active_cue,
        entered=result.entered,
        exited=result.exited,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for the caption service."""
    return APIResponse(message="Caption Service is healthy")


@app.get("/formats")
async def get_supported_formats() -> dict:
    """Get list of supported caption track formats."""
    return {
        "formats": list(TRACK_FORMATS.values()),
        "default_format": TrackFormat.VTT.value,
    }


@app.get("/config")
async def get_caption_config() -> dict:
    """Get current caption service configuration."""
    return {
        "provider": config.get("caption_provider", "mock"),
        "mock_delay": config.get("caption_mock_delay", 0.0),
        "export_basename": config.get("caption_export_basename", "subtitles_en"),
        "max_sessions": session_manager.max_sessions,
        "include_ids": config.get_pipeline_value("captions.render.include_ids", "auto"),
    }


@app.post("/sessions", response_model=SessionResponse)
async def create_session(request: SessionCreateRequest) -> SessionResponse:
    """Create a caption session from a finished cue list or a cue provider."""
    session = CaptionSession()
    try:
        if request.cues is not None:
            session.load(request.cues, media_name=request.media_name)
        else:
            provider = load_provider(request.provider)
            await session.load_from(provider, media_name=request.media_name)
    except Exception as e:
        raise _http_error(e) from e

    # A failed load must not evict a live session.
    session_manager.register(session)
    logger.info(f"Created caption session {session.session_id} with {len(session.store)} cues")
    return _session_response(session)


@app.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    try:
        return _session_response(session_manager.get(session_id))
    except Exception as e:
        raise _http_error(e) from e


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    if not session_manager.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Caption session {session_id} not found")
    return APIResponse(message=f"Caption session {session_id} deleted")


@app.get("/sessions/{session_id}/cues", response_model=list[TranscriptItem])
async def list_cues(session_id: str) -> list[TranscriptItem]:
    """List the transcript rows, flagging the active cue."""
    try:
        return session_manager.get(session_id).transcript()
    except Exception as e:
        raise _http_error(e) from e


@app.post("/sessions/{session_id}/tick", response_model=TickResponse)
async def tick(session_id: str, request: TickRequest) -> TickResponse:
    """Report the transport's current position and get the active cue back."""
    try:
        session = session_manager.get(session_id)
        result = session.tick(request.position)
        return _tick_response(session, result)
    except Exception as e:
        raise _http_error(e) from e


@app.get("/sessions/{session_id}/seek/{index}", response_model=SeekResponse)
async def seek(session_id: str, index: int) -> SeekResponse:
    """Return the playback coordinate the transport should seek to for a cue."""
    try:
        session = session_manager.get(session_id)
        position = session.seek(index)
        return SeekResponse(index=index, cue_id=session.store[index].id, position=position)
    except Exception as e:
        raise _http_error(e) from e


@app.get("/sessions/{session_id}/export")
async def export_track(
    session_id: str,
    track_format: TrackFormat = Query(default=TrackFormat.VTT, alias="format"),
) -> PlainTextResponse:
    """Download the session's caption track."""
    try:
        session = session_manager.get(session_id)
        content = session.export(track_format)
    except Exception as e:
        raise _http_error(e) from e

    return PlainTextResponse(
        content=content,
        media_type=TRACK_FORMATS[track_format]["mime_type"],
        headers={
            "Content-Disposition": f"attachment; filename={session.export_filename(track_format)}"
        },
    )


@app.post("/sessions/{session_id}/import", response_model=SessionResponse)
async def import_track(session_id: str, request: TrackImportRequest) -> SessionResponse:
    """Replace the session's cues with a parsed WebVTT document."""
    try:
        session = session_manager.get(session_id)
        session.import_track(request.content)
        return _session_response(session)
    except Exception as e:
        raise _http_error(e) from e


@app.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str) -> SessionResponse:
    try:
        session = session_manager.get(session_id)
        session.reset()
        return _session_response(session)
    except Exception as e:
        raise _http_error(e) from e


@app.websocket("/sessions/{session_id}/ws")
async def session_events(websocket: WebSocket, session_id: str):
    """Stream enter/exit events while the client reports playback positions."""
    await websocket.accept()
    try:
        session = session_manager.get(session_id)
    except SessionNotFoundError as e:
        await websocket.send_json({"event": "error", "message": str(e)})
        await websocket.close()
        return

    await websocket.send_json({"event": "connected", "session_id": session_id})
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError as e:
                await websocket.send_json({"event": "error", "message": f"Invalid JSON: {e}"})
                continue
            if not isinstance(message, dict):
                await websocket.send_json(
                    {"event": "error", "message": "Message must be a JSON object"}
                )
                continue
            action = message.get("action")

            if action == "tick":
                try:
                    result = session.tick(float(message.get("position")))
                except (TypeError, ValueError) as e:
                    await websocket.send_json({"event": "error", "message": f"Invalid position: {e}"})
                    continue
                if result.exited is not None:
                    await websocket.send_json({"event": "exit", "index": result.exited})
                if result.entered is not None:
                    await websocket.send_json({"event": "enter", "index": result.entered})
            elif action == "seek":
                index = message.get("index")
                if isinstance(index, bool) or not isinstance(index, int):
                    await websocket.send_json(
                        {"event": "error", "message": f"Invalid cue index: {index!r} is not an integer"}
                    )
                    continue
                try:
                    position = session.seek(index)
                except IndexError as e:
                    await websocket.send_json({"event": "error", "message": f"Invalid cue index: {e}"})
                    continue
                await websocket.send_json({"event": "seek", "position": position})
            elif action == "ping":
                await websocket.send_json({"event": "pong"})
            else:
                await websocket.send_json(
                    {"event": "error", "message": f"Unknown action: {action}"}
                )
    except WebSocketDisconnect:
        logger.info(f"Event stream for caption session {session_id} closed")


if __name__ == "__main__":
    try:
        import uvicorn
    except ImportError as e:
        raise RuntimeError("uvicorn must be installed to run this service.") from e
    uvicorn.run(app, host="0.0.0.0", port=8004)
