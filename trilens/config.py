"""
Configuration

Dataclass configs for the store, the optional classification fallback
and the engine that composes them. Every config can be built from
``TRILENS_*`` environment variables via ``from_env()``.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional


def _env_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    """Persistence settings. TTLs are in hours, as stored."""
    backend: str = "memory"  # "memory" or "redis"
    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    prefix: str = "ncp"
    state_ttl_hours: int = 168      # 1 week
    beat_ttl_hours: int = 720       # 30 days
    event_cache_ttl_hours: int = 24
    routing_history_limit: int = 100
    socket_timeout: float = 5.0
    degrade_to_memory: bool = True

    @property
    def state_ttl_seconds(self) -> int:
        return self.state_ttl_hours * 3600

    @property
    def beat_ttl_seconds(self) -> int:
        return self.beat_ttl_hours * 3600

    @property
    def event_cache_ttl_seconds(self) -> int:
        return self.event_cache_ttl_hours * 3600

    def redis_url(self) -> str:
        if self.url:
            return self.url
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> StoreConfig:
        env = os.environ if environ is None else environ
        return cls(
            backend=env.get("TRILENS_STORE_BACKEND", "memory").strip().lower(),
            url=env.get("TRILENS_REDIS_URL") or None,
            host=env.get("TRILENS_REDIS_HOST", "localhost"),
            port=int(env.get("TRILENS_REDIS_PORT", "6379")),
            db=int(env.get("TRILENS_REDIS_DB", "0")),
            password=env.get("TRILENS_REDIS_PASSWORD") or None,
            prefix=env.get("TRILENS_KEY_PREFIX", "ncp"),
            state_ttl_hours=int(env.get("TRILENS_STATE_TTL_HOURS", "168")),
            beat_ttl_hours=int(env.get("TRILENS_BEAT_TTL_HOURS", "720")),
            event_cache_ttl_hours=int(env.get("TRILENS_EVENT_TTL_HOURS", "24")),
            degrade_to_memory=_env_bool(env.get("TRILENS_DEGRADE_TO_MEMORY"), True),
        )


@dataclass
class FallbackConfig:
    """Optional language-model fallback for the lens classifiers."""
    provider: str = "none"  # "none", "mock" or "http"
    url: Optional[str] = None
    timeout_seconds: float = 30.0
    seed: int = 42

    @property
    def enabled(self) -> bool:
        return self.provider != "none"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> FallbackConfig:
        env = os.environ if environ is None else environ
        return cls(
            provider=env.get("TRILENS_FALLBACK_PROVIDER", "none").strip().lower(),
            url=env.get("TRILENS_FALLBACK_URL") or None,
            timeout_seconds=float(env.get("TRILENS_FALLBACK_TIMEOUT", "30")),
            seed=int(env.get("TRILENS_FALLBACK_SEED", "42")),
        )


@dataclass
class EngineConfig:
    """Unified configuration for one deployment."""
    story_id: str = "default-story"
    include_default_characters: bool = True
    include_default_themes: bool = True
    store: StoreConfig = None
    fallback: FallbackConfig = None

    def __post_init__(self):
        self.store = self.store or StoreConfig()
        self.fallback = self.fallback or FallbackConfig()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        env = os.environ if environ is None else environ
        return cls(
            story_id=env.get("TRILENS_STORY_ID", "default-story"),
            include_default_characters=_env_bool(env.get("TRILENS_DEFAULT_CHARACTERS"), True),
            include_default_themes=_env_bool(env.get("TRILENS_DEFAULT_THEMES"), True),
            store=StoreConfig.from_env(env),
            fallback=FallbackConfig.from_env(env),
        )
