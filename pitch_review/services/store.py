"""
Pitch Storage
=============
The record store is owned by the surrounding application. The pipeline only
needs to load a pitch, load its demo, and write one review update. An
in-memory implementation is provided for the API server and tests (replace
with a database-backed store in production).

Writes require an explicit service credential instead of ambient elevated
access.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..models.schemas import Demo, InAppNotification, Pitch, PitchReviewUpdate, User

log = logging.getLogger(__name__)

SERVICE_ROLE = "service_role"


@dataclass(frozen=True)
class ServiceCredential:
    """Credential the pipeline presents to the store"""
    name: str
    scopes: frozenset = field(default_factory=lambda: frozenset({SERVICE_ROLE}))

    @property
    def is_service_role(self) -> bool:
        return SERVICE_ROLE in self.scopes


def service_role_credential(name: str = "pitch-review") -> ServiceCredential:
    return ServiceCredential(name=name)


class PitchStore(ABC):
    """Persistence collaborator used by the engine"""

    @abstractmethod
    def get_pitch(self, pitch_id: str) -> Optional[Pitch]:
        ...

    @abstractmethod
    def get_demo_for_pitch(self, pitch_id: str) -> Optional[Demo]:
        ...

    @abstractmethod
    def apply_review(self, pitch_id: str, update: PitchReviewUpdate) -> Pitch:
        """Write every derived field of `update` in one step"""


class InMemoryPitchStore(PitchStore):
    """Dict-backed store"""

    def __init__(
        self,
        credential: ServiceCredential,
        pitches: Optional[Iterable[Pitch]] = None,
        demos: Optional[Iterable[Demo]] = None,
    ):
        self.credential = credential
        self._pitches: Dict[str, Pitch] = {p.id: p for p in (pitches or [])}
        self._demos: Dict[str, Demo] = {d.pitch_id: d for d in (demos or [])}

    def add_pitch(self, pitch: Pitch) -> Pitch:
        self._pitches[pitch.id] = pitch
        return pitch

    def add_demo(self, demo: Demo) -> Demo:
        self._demos[demo.pitch_id] = demo
        return demo

    def get_pitch(self, pitch_id: str) -> Optional[Pitch]:
        return self._pitches.get(pitch_id)

    def get_demo_for_pitch(self, pitch_id: str) -> Optional[Demo]:
        return self._demos.get(pitch_id)

    def apply_review(self, pitch_id: str, update: PitchReviewUpdate) -> Pitch:
        if not self.credential.is_service_role:
            raise PermissionError(f"Credential {self.credential.name!r} cannot write reviews")

        current = self._pitches.get(pitch_id)
        if current is None:
            raise KeyError(pitch_id)

        # Build the new record first so a failure leaves the old one in place
        updated = Pitch.model_validate({**current.model_dump(), **update.model_dump()})
        self._pitches[pitch_id] = updated
        log.debug("Applied review to pitch %s: %s", pitch_id, update.review_status.value)
        return updated


class UserDirectory:
    """Resolves bearer tokens to users"""

    def __init__(self, tokens: Optional[Dict[str, User]] = None):
        self._tokens: Dict[str, User] = dict(tokens or {})

    def register(self, token: str, user: User) -> None:
        self._tokens[token] = user

    def resolve(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        return self._tokens.get(token)


class NotificationInbox:
    """In-app notifications created for founders"""

    def __init__(self):
        self._items: List[InAppNotification] = []

    def create(self, notification: InAppNotification) -> InAppNotification:
        self._items.append(notification)
        return notification
