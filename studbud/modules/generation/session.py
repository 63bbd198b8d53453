"""Session state machine driving the study workflow.

One ``Session`` per client holds the phase, the single in-flight request and
the last result or error. Orchestration outcomes are applied in call order:
every request is tagged with an epoch, and a result arriving after a reset
(or after a newer request started) is discarded instead of applied.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
from uuid import uuid4

from studbud.core.logging import get_logger
from studbud.modules.generation.errors import (
    GenerationError,
    SessionStateError,
    ValidationError,
)
from studbud.modules.generation.gate import InsufficientContent
from studbud.modules.generation.models.items import (
    GenerationMode,
    GenerationResult,
    StudyItem,
)
from studbud.modules.generation.models.payload import (
    GenerationRequest,
    PreparedContent,
    RawInput,
    TextPayload,
)
from studbud.modules.generation.models.state import Phase, SessionState
from studbud.modules.generation.orchestrator import (
    DEFAULT_COUNT,
    GenerationOrchestrator,
    coerce_mode,
    validate_count,
)

logger = get_logger(__name__)

DEFAULT_MODE = GenerationMode.FLASHCARDS


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if not dt:
        return None
    return dt.isoformat().replace("+00:00", "Z")


def _short_id() -> str:
    # 8-char slice from uuid4
    return uuid4().hex[:8]


@dataclass
class Session:
    orchestrator: GenerationOrchestrator
    id: str = field(default_factory=_short_id)
    default_count: int = DEFAULT_COUNT
    phase: Phase = Phase.IDLE
    mode: GenerationMode = DEFAULT_MODE
    count: int = DEFAULT_COUNT
    use_external_search: bool = False
    content: Optional[PreparedContent] = None
    insufficient: Optional[InsufficientContent] = None
    request: Optional[GenerationRequest] = None
    result: Optional[GenerationResult] = None
    error: Optional[GenerationError] = None
    validation_message: Optional[str] = None
    cursor: int = 0
    created_at: datetime = field(default_factory=_now_utc)
    last_activity: datetime = field(default_factory=_now_utc)
    # runtime
    _epoch: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self.count = self.default_count

    # Helpers ------------------------------------------------------------
    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @property
    def items(self) -> list[StudyItem]:
        return list(self.result.items) if self.result is not None else []

    @property
    def current_item(self) -> Optional[StudyItem]:
        items = self.items
        if not items:
            return None
        return items[self.cursor]

    def _require(self, trigger: str, *phases: Phase) -> None:
        if self.phase not in phases:
            raise SessionStateError(trigger, self.phase.value)

    def _transition(self, to: Phase, trigger: str) -> None:
        logger.info(
            "Session %s: %s --%s--> %s",
            self.id,
            self.phase.value,
            trigger,
            to.value,
            extra={"session": self.id, "epoch": self._epoch},
        )
        self.phase = to
        self.last_activity = _now_utc()

    # Triggers -----------------------------------------------------------
    def submit(self, raw: RawInput) -> Phase:
        """IDLE -> SELECTING_MODE | INSUFFICIENT_CONTENT | ERROR.

        Empty input raises ``ValidationError`` without a transition.
        """
        self._require("submit", Phase.IDLE)
        self.validation_message = None
        try:
            outcome = self.orchestrator.prepare(raw)
        except ValidationError as exc:
            self.validation_message = exc.message
            raise
        except GenerationError as exc:
            self.error = exc
            self._transition(Phase.ERROR, "submit")
            return self.phase

        if isinstance(outcome, InsufficientContent):
            self.insufficient = outcome
            self._transition(Phase.INSUFFICIENT_CONTENT, "submit")
        else:
            self.content = outcome.content
            self.use_external_search = False
            self._transition(Phase.SELECTING_MODE, "submit")
        return self.phase

    def retry(self) -> Phase:
        """INSUFFICIENT_CONTENT -> IDLE."""
        self._require("retry", Phase.INSUFFICIENT_CONTENT)
        self.insufficient = None
        self._transition(Phase.IDLE, "retry")
        return self.phase

    def accept_search(self) -> Phase:
        """INSUFFICIENT_CONTENT -> SELECTING_MODE with search augmentation forced on."""
        self._require("accept_search", Phase.INSUFFICIENT_CONTENT)
        if self.insufficient is None:
            raise SessionStateError("accept_search", self.phase.value)
        self.content = PreparedContent(
            payload=TextPayload(text=self.insufficient.seed),
            origin=self.insufficient.content.origin,
            label=self.insufficient.content.label,
        )
        self.insufficient = None
        self.use_external_search = True
        self._transition(Phase.SELECTING_MODE, "accept_search")
        return self.phase

    async def choose(self, mode: Union[GenerationMode, str], count: Any) -> Phase:
        """SELECTING_MODE -> PROCESSING -> VIEWING | ERROR.

        ``count`` is validated synchronously; an invalid count raises
        ``ValidationError`` and the session stays in SELECTING_MODE.
        """
        self._require("choose", Phase.SELECTING_MODE)
        try:
            mode = coerce_mode(mode)
            count = validate_count(count)
        except ValidationError as exc:
            self.validation_message = exc.message
            raise
        if self.content is None:
            raise SessionStateError("choose", self.phase.value)

        self.validation_message = None
        self.mode = mode
        self.count = count
        self.request = GenerationRequest(
            payload=self.content.payload,
            mode=mode,
            count=count,
            use_external_search=self.use_external_search,
        )
        self._epoch += 1
        epoch = self._epoch
        self._transition(Phase.PROCESSING, "choose")

        try:
            result = await self.orchestrator.run(self.request)
        except GenerationError as exc:
            if self._is_stale(epoch):
                return self.phase
            self.request = None
            self.content = None
            self.error = exc
            self._transition(Phase.ERROR, "failure")
            return self.phase

        if self._is_stale(epoch):
            return self.phase
        self.request = None
        self.content = None
        self.result = result
        self.cursor = 0
        self._transition(Phase.VIEWING, "success")
        return self.phase

    def _is_stale(self, epoch: int) -> bool:
        if epoch == self._epoch:
            return False
        logger.info(
            "Session %s: discarding outcome of stale request (epoch %d, current %d)",
            self.id,
            epoch,
            self._epoch,
            extra={"session": self.id, "epoch": epoch},
        )
        return True

    def reset(self) -> Phase:
        """Any phase -> IDLE; discards payload, result and error.

        Any outstanding orchestration becomes stale and its outcome is ignored.
        """
        self._epoch += 1
        self.content = None
        self.insufficient = None
        self.request = None
        self.result = None
        self.error = None
        self.validation_message = None
        self.cursor = 0
        self.mode = DEFAULT_MODE
        self.count = self.default_count
        self.use_external_search = False
        self._transition(Phase.IDLE, "reset")
        return self.phase

    # Navigation ---------------------------------------------------------
    def next_item(self) -> Optional[StudyItem]:
        self._require("next", Phase.VIEWING)
        if self.cursor < len(self.items) - 1:
            self.cursor += 1
        return self.current_item

    def previous_item(self) -> Optional[StudyItem]:
        self._require("previous", Phase.VIEWING)
        if self.cursor > 0:
            self.cursor -= 1
        return self.current_item

    def to_state(self) -> SessionState:
        return SessionState(
            id=self.id,
            phase=self.phase,
            mode=self.mode,
            count=self.count,
            use_external_search=self.use_external_search,
            items=self.items,
            sources=list(self.result.sources) if self.result is not None else [],
            cursor=self.cursor,
            total=len(self.items),
            error=self.error_message,
            error_kind=self.error.kind if self.error else None,
            validation_message=self.validation_message,
            search_seed=self.insufficient.seed if self.insufficient else None,
            created_at=_iso(self.created_at) or "",
        )


class SessionManager:
    """In-process registry of sessions keyed by short ids."""

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        *,
        idle_seconds: int = 3600,
        default_count: int = DEFAULT_COUNT,
    ) -> None:
        self.orchestrator = orchestrator
        self.sessions: dict[str, Session] = {}
        self._idle_seconds = idle_seconds
        self._default_count = default_count

    def create(self) -> Session:
        session = Session(
            orchestrator=self.orchestrator, default_count=self._default_count
        )
        self.sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def drop(self, session_id: str) -> None:
        session = self.sessions.pop(session_id, None)
        if session is not None:
            session.reset()

    def sweep(self, *, now: Optional[datetime] = None) -> int:
        """Drop sessions idle for longer than the configured window."""
        cutoff = (now or _now_utc()) - timedelta(seconds=self._idle_seconds)
        stale = [
            sid
            for sid, s in self.sessions.items()
            if s.last_activity < cutoff and s.phase != Phase.PROCESSING
        ]
        for sid in stale:
            self.drop(sid)
        return len(stale)
