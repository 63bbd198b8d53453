from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import PlainTextResponse

from studbud.core.config import settings
from studbud.modules.generation.errors import SessionStateError, ValidationError
from studbud.modules.generation.export import export_filename, render_text, to_jsonable
from studbud.modules.generation.models.payload import (
    FileInput,
    PastedText,
    RawInput,
    TopicInput,
)
from studbud.modules.generation.models.state import Phase, SessionState
from studbud.modules.generation.session import Session, SessionManager
from .schemas import (
    ErrorDetail,
    ErrorResponse,
    GenerateRequest,
    TextSubmitRequest,
    TopicSubmitRequest,
)


router = APIRouter()

PREFIX = f"/{settings.app.version}/study/sessions"

INVALID_INPUT = {422: {"model": ErrorResponse, "description": "Invalid input"}}


def get_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


Manager = Annotated[SessionManager, Depends(get_manager)]


def _session_or_404(manager: SessionManager, session_id: str) -> Session:
    session = manager.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="session_not_found")
    return session


def _conflict(exc: SessionStateError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"trigger": exc.trigger, "phase": exc.phase},
    )


def _invalid(exc: ValidationError) -> HTTPException:
    detail = ErrorDetail(**exc.to_dict())
    return HTTPException(status_code=422, detail=detail.model_dump())


def _submit(session: Session, raw: RawInput) -> SessionState:
    try:
        session.submit(raw)
    except SessionStateError as exc:
        raise _conflict(exc)
    except ValidationError as exc:
        raise _invalid(exc)
    return session.to_state()


@router.post(
    PREFIX,
    response_model=SessionState,
    status_code=status.HTTP_201_CREATED,
    tags=["study"],
)
async def create_session(manager: Manager) -> SessionState:
    manager.sweep()
    return manager.create().to_state()


@router.get(f"{PREFIX}/{{session_id}}", response_model=SessionState, tags=["study"])
async def get_session(session_id: str, manager: Manager) -> SessionState:
    return _session_or_404(manager, session_id).to_state()


@router.delete(
    f"{PREFIX}/{{session_id}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["study"],
)
async def delete_session(session_id: str, manager: Manager) -> None:
    _session_or_404(manager, session_id)
    manager.drop(session_id)


@router.post(
    f"{PREFIX}/{{session_id}}/text",
    response_model=SessionState,
    responses=INVALID_INPUT,
    tags=["study"],
)
async def submit_text(
    session_id: str, req: TextSubmitRequest, manager: Manager
) -> SessionState:
    session = _session_or_404(manager, session_id)
    return _submit(session, PastedText(text=req.text))


@router.post(
    f"{PREFIX}/{{session_id}}/topic",
    response_model=SessionState,
    responses=INVALID_INPUT,
    tags=["study"],
)
async def submit_topic(
    session_id: str, req: TopicSubmitRequest, manager: Manager
) -> SessionState:
    session = _session_or_404(manager, session_id)
    return _submit(session, TopicInput(topic=req.topic))


@router.post(
    f"{PREFIX}/{{session_id}}/upload",
    response_model=SessionState,
    responses=INVALID_INPUT,
    tags=["study"],
)
async def submit_file(
    session_id: str, manager: Manager, file: UploadFile = File(...)
) -> SessionState:
    session = _session_or_404(manager, session_id)
    data = await file.read()
    raw = FileInput(
        name=file.filename or "upload",
        data=data,
        media_type=file.content_type,
    )
    return _submit(session, raw)


@router.post(f"{PREFIX}/{{session_id}}/retry", response_model=SessionState, tags=["study"])
async def retry(session_id: str, manager: Manager) -> SessionState:
    session = _session_or_404(manager, session_id)
    try:
        session.retry()
    except SessionStateError as exc:
        raise _conflict(exc)
    return session.to_state()


@router.post(f"{PREFIX}/{{session_id}}/search", response_model=SessionState, tags=["study"])
async def accept_search(session_id: str, manager: Manager) -> SessionState:
    session = _session_or_404(manager, session_id)
    try:
        session.accept_search()
    except SessionStateError as exc:
        raise _conflict(exc)
    return session.to_state()


@router.post(
    f"{PREFIX}/{{session_id}}/generate",
    response_model=SessionState,
    responses=INVALID_INPUT,
    tags=["study"],
)
async def generate(
    session_id: str, req: GenerateRequest, manager: Manager
) -> SessionState:
    session = _session_or_404(manager, session_id)
    try:
        await session.choose(req.mode, req.count)
    except SessionStateError as exc:
        raise _conflict(exc)
    except ValidationError as exc:
        raise _invalid(exc)
    return session.to_state()


@router.post(f"{PREFIX}/{{session_id}}/next", response_model=SessionState, tags=["study"])
async def next_item(session_id: str, manager: Manager) -> SessionState:
    session = _session_or_404(manager, session_id)
    try:
        session.next_item()
    except SessionStateError as exc:
        raise _conflict(exc)
    return session.to_state()


@router.post(
    f"{PREFIX}/{{session_id}}/previous", response_model=SessionState, tags=["study"]
)
async def previous_item(session_id: str, manager: Manager) -> SessionState:
    session = _session_or_404(manager, session_id)
    try:
        session.previous_item()
    except SessionStateError as exc:
        raise _conflict(exc)
    return session.to_state()


@router.post(f"{PREFIX}/{{session_id}}/reset", response_model=SessionState, tags=["study"])
async def reset(session_id: str, manager: Manager) -> SessionState:
    session = _session_or_404(manager, session_id)
    session.reset()
    return session.to_state()


@router.get(f"{PREFIX}/{{session_id}}/export", tags=["study"])
async def export(
    session_id: str,
    manager: Manager,
    format: Literal["json", "text"] = "json",
):
    session = _session_or_404(manager, session_id)
    if session.phase != Phase.VIEWING or session.result is None:
        raise _conflict(SessionStateError("export", session.phase.value))
    if format == "text":
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        filename = export_filename(session.result.mode, stamp=stamp)
        return PlainTextResponse(
            render_text(session.result),
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return to_jsonable(session.result)
