"""
Computer profile registry.

The registry owns the ``computers`` list of the settings blob. It is loaded
once at startup and saved after every mutation. A failed save rolls the
mutation back and is reported through the notifier; callers get ``False``
rather than an exception.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Callable

from ..config import Settings, SettingsStore
from ..errors import DuplicateIdentity, PersistenceFailure, UnknownProfile
from ..models import ComputerProfile, LiveIdentity, Platform
from ..notices import Notifier, NullNotifier

logger = logging.getLogger(__name__)


class ComputerProfileRegistry:
    """Ordered, persisted set of computer profiles."""

    def __init__(
        self,
        settings: Settings,
        store: SettingsStore | None = None,
        live: LiveIdentity | None = None,
        notifier: Notifier | None = None,
    ):
        self.settings = settings
        self.store = store
        self.live = live
        self.notifier = notifier or NullNotifier()

    @classmethod
    def load(
        cls,
        store: SettingsStore,
        live: LiveIdentity | None = None,
        notifier: Notifier | None = None,
    ) -> "ComputerProfileRegistry":
        return cls(store.load(), store=store, live=live, notifier=notifier)

    # -- queries -----------------------------------------------------------

    def list(self) -> list[ComputerProfile]:
        """Profiles in registration order."""
        return list(self.settings.computers)

    def __len__(self) -> int:
        return len(self.settings.computers)

    def get(self, profile_id: str) -> ComputerProfile:
        for profile in self.settings.computers:
            if profile.id == profile_id:
                return profile
        raise UnknownProfile(f"No computer profile with id {profile_id!r}")

    def find_current(self, platform: Platform | None, username: str) -> ComputerProfile | None:
        """Profile whose (platform, username) equals the given pair."""
        for profile in self.settings.computers:
            if profile.platform == platform and profile.username == username:
                return profile
        return None

    def current(self) -> ComputerProfile | None:
        """Profile of the live computer, if registered."""
        if self.live is None or not self.live.known:
            return None
        return self.find_current(self.live.platform, self.live.username)

    # -- mutations ---------------------------------------------------------

    def add(self, profile: ComputerProfile) -> bool:
        """Register a profile.

        Raises:
            DuplicateIdentity: If the id is taken, or the live computer's
                (platform, username) pair is already registered
        """
        if any(p.id == profile.id for p in self.settings.computers):
            raise DuplicateIdentity(f"Profile id {profile.id!r} is already registered")

        existing = self.find_current(profile.platform, profile.username)
        if existing is not None and existing.is_current(self.live):
            raise DuplicateIdentity(
                f"This computer is already registered as {existing.display_name!r} "
                f"({existing.platform.value}/{existing.username})"
            )

        return self._mutate("add", lambda computers: computers.append(profile))

    def register_current(self, display_name: str, sub_path: str = "") -> ComputerProfile | None:
        """Register the live computer ("register this computer").

        Returns None if the profile could not be saved.

        Raises:
            ValueError: If the live identity could not be determined
            DuplicateIdentity: If it is already registered
        """
        if self.live is None or not self.live.known:
            raise ValueError("Cannot determine this computer's platform and username")
        profile = ComputerProfile(
            id=uuid.uuid4().hex[:12],
            display_name=display_name,
            platform=self.live.platform,
            username=self.live.username,
            sub_path=sub_path,
        )
        if not self.add(profile):
            return None
        return profile

    def remove(self, profile_id: str) -> bool:
        self.get(profile_id)

        def _apply(computers: list[ComputerProfile]) -> None:
            computers[:] = [p for p in computers if p.id != profile_id]

        return self._mutate("remove", _apply)

    def update_sub_path(self, profile_id: str, sub_path: str) -> bool:
        self.get(profile_id)

        def _apply(computers: list[ComputerProfile]) -> None:
            for profile in computers:
                if profile.id == profile_id:
                    profile.sub_path = sub_path.strip()

        return self._mutate("update_sub_path", _apply)

    def rename(self, profile_id: str, display_name: str) -> bool:
        self.get(profile_id)

        def _apply(computers: list[ComputerProfile]) -> None:
            for profile in computers:
                if profile.id == profile_id:
                    profile.display_name = display_name

        return self._mutate("rename", _apply)

    def _mutate(self, operation: str, apply: Callable[[list[ComputerProfile]], None]) -> bool:
        """Apply a change to the profile list and persist it, rolling back on failure."""
        snapshot = copy.deepcopy(self.settings.computers)
        apply(self.settings.computers)

        if self.store is None:
            return True

        try:
            self.store.save(self.settings)
        except PersistenceFailure as e:
            self.settings.computers = snapshot
            logger.warning("Registry %s not saved: %s", operation, e)
            self.notifier.notify(f"Failed to save computer profiles: {e}", style="red")
            return False

        logger.debug("Registry %s saved (%d profiles)", operation, len(self.settings.computers))
        return True
