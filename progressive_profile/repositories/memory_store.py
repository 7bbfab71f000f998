"""
In-Memory Profile Store - Progressive Profile Engine
progressive_profile/repositories/memory_store.py

Injectable ProfileStore for tests and the replay CLI. Each instance owns
its own data; copies go in and out so callers never share state with it.
"""

import threading
from typing import Dict, Optional

from progressive_profile.models.profile import ConsolidatedProfile
from progressive_profile.repositories.base import ProfileStore


class InMemoryProfileStore(ProfileStore):
    """Thread-safe dict-backed ProfileStore."""

    def __init__(self):
        self._profiles: Dict[str, ConsolidatedProfile] = {}
        self._by_child: Dict[str, str] = {}
        self._lock = threading.Lock()

    def load(self, profile_id: str) -> Optional[ConsolidatedProfile]:
        with self._lock:
            stored = self._profiles.get(profile_id)
            return stored.model_copy(deep=True) if stored is not None else None

    def save(self, profile: ConsolidatedProfile) -> ConsolidatedProfile:
        with self._lock:
            key = self.child_key(profile.child_name)
            self.check_version(profile, self._profiles.get(profile.id), self._by_child.get(key))
            self._profiles[profile.id] = profile.model_copy(deep=True)
            self._by_child[key] = profile.id
            return profile

    def find_by_child_name(self, child_name: str) -> Optional[ConsolidatedProfile]:
        with self._lock:
            profile_id = self._by_child.get(self.child_key(child_name))
            if profile_id is None:
                return None
            return self._profiles[profile_id].model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._profiles)
