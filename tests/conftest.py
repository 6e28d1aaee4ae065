"""Shared fixtures: fakes for every external capability the pipeline uses."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from pitch_review.engine import PitchReviewEngine
from pitch_review.errors import LLMError
from pitch_review.models.schemas import (
    InAppNotification,
    Pitch,
    ProbeOutcome,
    UrlProbeResult,
)
from pitch_review.services.notifier import NotificationSender, Notifier
from pitch_review.services.store import InMemoryPitchStore, service_role_credential
from pitch_review.services.url_probe import extract_host

CLEAN_REVIEW = {"has_red_flags": False, "concerns": [], "recommendation": "approve"}


class FakeProbe:
    """Returns a fixed outcome for any well-formed URL"""

    def __init__(self, outcome: ProbeOutcome = ProbeOutcome.REACHABLE, status_code: int = 200):
        self.outcome = outcome
        self.status_code = status_code
        self.calls: List[Optional[str]] = []

    def probe(self, url: Optional[str]) -> UrlProbeResult:
        self.calls.append(url)
        if not url or not url.strip():
            return UrlProbeResult(outcome=ProbeOutcome.MISSING)
        host = extract_host(url)
        if host is None:
            return UrlProbeResult(outcome=ProbeOutcome.MALFORMED)
        status = self.status_code if self.outcome in (
            ProbeOutcome.REACHABLE, ProbeOutcome.BAD_STATUS
        ) else None
        return UrlProbeResult(outcome=self.outcome, host=host, status_code=status)


Answer = Union[Dict[str, Any], Exception, Callable[[str, Dict[str, Any]], Dict[str, Any]]]


class FakeLLM:
    """Answers by schema: the shallow review and the deep analysis ask for different keys"""

    configured = True

    def __init__(self, shallow: Answer = None, deep: Answer = None):
        self.shallow = CLEAN_REVIEW if shallow is None else shallow
        self.deep = deep
        self.prompts: List[str] = []

    def evaluate(self, prompt: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        self.prompts.append(prompt)
        answer = self.deep if "overall_score" in schema["properties"] else self.shallow
        if answer is None:
            raise LLMError("no answer configured")
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(prompt, schema)
        return dict(answer)


class RecordingSender(NotificationSender):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.emails: List[Dict[str, str]] = []
        self.notifications: List[InAppNotification] = []

    def send_email(self, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.emails.append({"to": to, "subject": subject, "body": body})

    def create_notification(self, notification: InAppNotification) -> None:
        if self.fail:
            raise ConnectionError("notification service down")
        self.notifications.append(notification)


def make_pitch(**overrides) -> Pitch:
    data = {
        "id": "pitch-1",
        "startup_name": "Ledgerly",
        "one_liner": "Bookkeeping automation for independent bakeries",
        "category": "Fintech",
        "what_problem_do_you_solve": (
            "Small bakeries lose hours every week reconciling supplier invoices "
            "by hand and rarely know their real margins."
        ),
        "product_url": "https://ledgerly.io",
        "is_product_live": True,
        "product_stage": "launched",
        "founder_id": "founder-1",
    }
    data.update(overrides)
    return Pitch(**data)


@pytest.fixture()
def pitch_factory():
    return make_pitch


@pytest.fixture()
def store():
    return InMemoryPitchStore(credential=service_role_credential(), pitches=[make_pitch()])


@pytest.fixture()
def sender():
    return RecordingSender()


@pytest.fixture()
def build_engine(store, sender):
    def _build(
        llm: Optional[FakeLLM] = None,
        probe: Optional[FakeProbe] = None,
        notify_sender: Optional[NotificationSender] = None,
        **kwargs,
    ) -> PitchReviewEngine:
        return PitchReviewEngine(
            store=store,
            llm=llm or FakeLLM(),
            probe=probe or FakeProbe(),
            notifier=Notifier(notify_sender or sender, app_url="https://app.test"),
            **kwargs,
        )

    return _build
