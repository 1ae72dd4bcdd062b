"""
Storage Layer

Key-value persistence for ledgers and their satellites.
"""

from .keys import StoreKeys
from .manager import NarrativeStateManager, create_state_manager
from .store import InMemoryStore, KeyValueStore, RedisStore, StoreUnavailable, build_store

__all__ = [
    'StoreKeys', 'NarrativeStateManager', 'create_state_manager',
    'InMemoryStore', 'KeyValueStore', 'RedisStore', 'StoreUnavailable', 'build_store',
]
