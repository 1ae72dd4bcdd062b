"""
Trilens Narrative API Server
============================

HTTP surface over the processor, the state manager and the coherence
engine.

Endpoints:
- GET    /health                                   -> store health
- POST   /api/v1/events/classify                   -> three-lens analysis
- GET    /api/v1/sessions                          -> session ids
- POST   /api/v1/sessions/{session_id}/events      -> classify + append beat
- GET    /api/v1/sessions/{session_id}             -> full ledger
- GET    /api/v1/sessions/{session_id}/beats       -> recent beats, newest first
- GET    /api/v1/sessions/{session_id}/coherence   -> coherence analysis
- DELETE /api/v1/sessions/{session_id}             -> drop session data
- POST   /api/v1/coherence/analyze                 -> coherence of a posted beat list

Usage:
    uvicorn trilens.api.server:app --reload
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from adapter.classifier import ProviderClassifier, classifier_from_settings

from ..coherence import NarrativeCoherenceEngine
from ..config import EngineConfig
from ..contracts.base import Error, ErrorCode
from ..ledger import create_routing_decision, should_start_new_episode
from ..lenses import find_kind
from ..observability import AuditLog
from ..processor import ThreeLensProcessor
from ..serialization import (
    beat_to_dict, coherence_result_to_dict, ledger_to_dict, position_to_dict,
    synthesis_to_dict
)
from ..storage import NarrativeStateManager, create_state_manager
from .schemas import CoherenceRequest, EventRequest, SessionEventRequest

# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

config: Optional[EngineConfig] = None
audit: Optional[AuditLog] = None
manager: Optional[NarrativeStateManager] = None
processor: Optional[ThreeLensProcessor] = None
coherence_engine: Optional[NarrativeCoherenceEngine] = None
fallback: Optional[ProviderClassifier] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build config, audit log, store and processor on startup."""
    global config, audit, manager, processor, coherence_engine, fallback

    config = EngineConfig.from_env()
    audit = AuditLog()
    print(f"[*] Initializing narrative store (backend={config.store.backend}, prefix={config.store.prefix!r})")

    try:
        manager = create_state_manager(config, audit)
        fallback = classifier_from_settings(
            config.fallback.provider,
            url=config.fallback.url,
            timeout_seconds=config.fallback.timeout_seconds,
            seed=config.fallback.seed,
        )
        processor = ThreeLensProcessor(fallback=fallback, audit=audit)
        coherence_engine = NarrativeCoherenceEngine(audit=audit)
        print(f"[*] Store ready; fallback provider: {config.fallback.provider}")
    except Exception as e:
        print(f"[!] FAILED to initialize: {e}")
        raise

    yield

    print("[*] Shutting down store connection.")
    manager.close()
    if fallback is not None:
        fallback.close()
    manager = None
    fallback = None
    processor = None
    coherence_engine = None


app = FastAPI(
    title="Trilens Narrative API",
    version="0.1.0",
    description="Three-lens event classification and narrative coherence",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


def _ready() -> None:
    if manager is None or processor is None:
        raise HTTPException(status_code=503, detail="Server not initialized")


def _error_detail(error: Error) -> dict:
    return {"code": error.code.name, "message": error.message, "context": dict(error.context)}


def _resolve_kind(request: EventRequest):
    if request.kind is None:
        return None
    kind = find_kind(request.kind)
    if kind is None:
        error = Error(ErrorCode.INVALID_EVENT, f"Unknown event kind: {request.kind}")
        raise HTTPException(status_code=422, detail=_error_detail(error))
    return kind


def _analyze(request: EventRequest):
    kind = _resolve_kind(request)
    result = processor.process(request.payload, kind)
    if result.is_failure:
        raise HTTPException(status_code=422, detail=_error_detail(result.error))
    return kind, result.value


def _require_state(session_id: str):
    ledger = manager.get_state(session_id)
    if ledger is None:
        error = Error(ErrorCode.STATE_NOT_FOUND, f"No state for session {session_id}")
        raise HTTPException(status_code=404, detail=_error_detail(error))
    return ledger


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health")
async def health_check():
    _ready()
    health = manager.health_check()
    health["backend"] = config.store.backend
    return health


@app.post("/api/v1/events/classify")
async def classify_event(request: EventRequest):
    _ready()
    _, analysis = _analyze(request)
    event_id = request.payload.get("event_id") or request.payload.get("eventId")
    if isinstance(event_id, str) and event_id:
        manager.cache_event_analysis(event_id, analysis)
    return synthesis_to_dict(analysis)


@app.get("/api/v1/sessions")
async def list_sessions():
    _ready()
    return {"sessions": manager.list_sessions(), "current": manager.get_current_session()}


@app.post("/api/v1/sessions/{session_id}/events")
async def add_session_event(session_id: str, request: SessionEventRequest):
    """
    Classify the event, append it as a beat, record where it was routed
    and roll the episode over when it is complete.
    """
    _ready()
    kind, analysis = _analyze(request)

    ledger = manager.get_or_create_state(
        request.story_id or config.story_id,
        session_id,
        include_default_characters=config.include_default_characters,
        include_default_themes=config.include_default_themes,
    )
    beat = processor.create_beat(request.payload, analysis, len(ledger.beats) + 1, kind)
    ledger = manager.add_beat_to_session(session_id, beat)

    decision = create_routing_decision(
        backend=analysis.lead_lens.value,
        flow=analysis.perspective(analysis.lead_lens).category,
        analysis=analysis,
        position=ledger.position,
        score=analysis.coherence,
        result_summary=beat.content[:100],
    )
    ledger = manager.record_routing_decision(session_id, decision)

    new_episode = None
    if should_start_new_episode(ledger):
        closing = ledger.current_episode_id or f"{session_id}-b0"
        manager.save_episode(closing, [b.id for b in ledger.beats[-ledger.episode_beats_count:]])
        new_episode = f"{session_id}-b{len(ledger.beats)}"
        manager.start_new_episode(session_id, new_episode)

    return {
        "beat": beat_to_dict(beat),
        "analysis": synthesis_to_dict(analysis),
        "position": position_to_dict(ledger.position),
        "overallCoherence": ledger.overall_coherence,
        "newEpisodeId": new_episode,
    }


@app.get("/api/v1/sessions/{session_id}")
async def get_session(session_id: str):
    _ready()
    return ledger_to_dict(_require_state(session_id))


@app.get("/api/v1/sessions/{session_id}/beats")
async def get_session_beats(session_id: str, count: int = 10):
    _ready()
    _require_state(session_id)
    return {"beats": [beat_to_dict(b) for b in manager.get_recent_beats(session_id, count)]}


@app.get("/api/v1/sessions/{session_id}/coherence")
async def get_session_coherence(session_id: str):
    _ready()
    ledger = _require_state(session_id)
    return coherence_result_to_dict(coherence_engine.analyze_ledger(ledger))


@app.delete("/api/v1/sessions/{session_id}")
async def delete_session(session_id: str):
    _ready()
    _require_state(session_id)
    manager.delete_session(session_id)
    return {"deleted": session_id}


@app.post("/api/v1/coherence/analyze")
async def analyze_coherence(request: CoherenceRequest):
    _ready()
    result = coherence_engine.analyze(
        [b.to_beat() for b in request.beats],
        [c.to_character() for c in request.characters],
        [t.to_theme() for t in request.themes],
    )
    return coherence_result_to_dict(result)
