"""Tests for the external collaborators: URL probe, LLM client, notifier."""
from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest

from conftest import RecordingSender, make_pitch
from pitch_review.errors import InvalidNotificationError, LLMError
from pitch_review.models.schemas import DeepAnalysis, ProbeOutcome, ReviewStatus, User
from pitch_review.services.llm_client import LLMClient, parse_json_response
from pitch_review.services.notifier import Notifier
from pitch_review.services.url_probe import UrlProbe, extract_host


# ---------------------------------------------------------------------------
# URL probe
# ---------------------------------------------------------------------------

def probe_with(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return UrlProbe(timeout=1, client=client)


def test_probe_reports_reachable_on_2xx():
    seen = []

    def handler(request):
        seen.append(request.method)
        return httpx.Response(200)

    result = probe_with(handler).probe("https://ledgerly.io")

    assert result.outcome == ProbeOutcome.REACHABLE
    assert result.host == "ledgerly.io"
    assert seen == ["HEAD"]


def test_probe_reports_bad_status():
    result = probe_with(lambda request: httpx.Response(503)).probe("https://ledgerly.io")

    assert result.outcome == ProbeOutcome.BAD_STATUS
    assert result.status_code == 503
    assert result.responded is True


def test_probe_converts_timeouts_to_unreachable():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    result = probe_with(handler).probe("https://ledgerly.io")

    assert result.outcome == ProbeOutcome.UNREACHABLE
    assert result.responded is False
    assert "ConnectTimeout" in result.error


def test_probe_missing_and_malformed_skip_the_network():
    def handler(request):
        raise AssertionError("no request expected")

    probe = probe_with(handler)
    assert probe.probe(None).outcome == ProbeOutcome.MISSING
    assert probe.probe("ledgerly dot io").outcome == ProbeOutcome.MALFORMED


def test_probe_treats_idna_failures_as_malformed():
    def handler(request):
        raise UnicodeError("encoding with 'idna' codec failed (label empty or too long)")

    result = probe_with(handler).probe("http://a..b.com")

    assert result.outcome == ProbeOutcome.MALFORMED


def test_probe_converts_unexpected_errors_to_unreachable():
    def handler(request):
        raise OSError("resolver crashed")

    result = probe_with(handler).probe("https://ledgerly.io")

    assert result.outcome == ProbeOutcome.UNREACHABLE
    assert "OSError" in result.error


def test_real_probe_completes_for_empty_host_label():
    result = UrlProbe(timeout=2).probe("http://a..b.com")

    assert result.outcome in (ProbeOutcome.MALFORMED, ProbeOutcome.UNREACHABLE)


@pytest.mark.parametrize("url, host", [
    ("https://WWW.Ledgerly.io/path", "www.ledgerly.io"),
    ("http://localhost:8000", "localhost"),
    ("mailto:ada@ledgerly.io", None),
    ("//ledgerly.io", None),
])
def test_extract_host(url, host):
    assert extract_host(url) == host


# ---------------------------------------------------------------------------
# LLM client
# ---------------------------------------------------------------------------

def test_parse_json_strips_code_fences():
    raw = '```json\n{"has_red_flags": false, "concerns": []}\n```'
    assert parse_json_response(raw) == {"has_red_flags": False, "concerns": []}


@pytest.mark.parametrize("raw", ["not json", "[1, 2, 3]", "```\n```"])
def test_parse_json_rejects_non_objects(raw):
    with pytest.raises(LLMError):
        parse_json_response(raw)


def test_unconfigured_client_raises_llm_error():
    client = LLMClient(api_key="test-key", provider="openai")
    client.client = None

    with pytest.raises(LLMError):
        client.evaluate("prompt", {"type": "object", "properties": {}})


def test_openai_compatible_call_sends_schema_and_parses_answer():
    client = LLMClient(api_key="test-key", provider="openai", model="gpt-test")
    sdk = MagicMock()
    sdk.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content='{"overall_score": 71}'))]
    )
    client.client = sdk

    result = client.evaluate("Rate this pitch", {"type": "object", "properties": {"overall_score": {}}})

    assert result == {"overall_score": 71}
    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert "overall_score" in kwargs["messages"][1]["content"]


def test_transport_errors_are_wrapped():
    client = LLMClient(api_key="test-key", provider="openai")
    sdk = MagicMock()
    sdk.chat.completions.create.side_effect = RuntimeError("socket closed")
    client.client = sdk

    with pytest.raises(LLMError, match="socket closed"):
        client.evaluate("prompt", {"type": "object", "properties": {}})


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError):
        LLMClient(api_key="test-key", provider="carrier-pigeon")


# ---------------------------------------------------------------------------
# Notifier
# ---------------------------------------------------------------------------

ADA = User(id="founder-1", email="ada@ledgerly.io", full_name="Ada")


def analysis(**overrides):
    data = {
        "overall_score": 62,
        "strengths": ["Clear niche"],
        "improvements": ["Show traction"],
        "pitch_description_improvements": [],
        "demo_feedback": ["Shorter intro"],
        "red_flags": [],
        "message_to_founder": "You're close!",
    }
    data.update(overrides)
    return DeepAnalysis(**data)


def test_analysis_email_for_revision():
    notifier = Notifier(RecordingSender(), app_url="https://app.test/")

    subject, body = notifier.compose_analysis_email(
        ADA, make_pitch(), analysis(), ReviewStatus.NEEDS_REVISION
    )

    assert subject.endswith("Ledgerly")
    assert body.startswith("Hi Ada,")
    assert "scored 62/100" in body
    assert "• Clear niche" in body
    assert "Demo Feedback:" in body
    assert "Pitch Description Suggestions:" not in body
    assert "request a manual review" in body
    assert "https://app.test/Profile" in body


def test_approved_email_has_no_manual_review_hint():
    notifier = Notifier(RecordingSender(), app_url="https://app.test")

    _, body = notifier.compose_analysis_email(
        User(id="u", email="ada@ledgerly.io"), make_pitch(), analysis(overall_score=90),
        ReviewStatus.APPROVED,
    )

    assert body.startswith("Hi ada@ledgerly.io,")
    assert "is now live" in body
    assert "manual review" not in body


def test_send_analysis_summary_swallows_delivery_errors():
    notifier = Notifier(RecordingSender(fail=True))

    assert notifier.send_analysis_summary(ADA, make_pitch(), analysis(), ReviewStatus.REJECTED) is False


@pytest.mark.parametrize("status, notif_type, text", [
    (ReviewStatus.APPROVED, "pitch_approved", 'Your pitch "Ledgerly" has been approved and is now live!'),
    (ReviewStatus.REJECTED, "pitch_rejected", 'Your pitch "Ledgerly" was not approved. Not a startup product'),
    (ReviewStatus.NEEDS_REVISION, "pitch_needs_revision", 'Your pitch "Ledgerly" needs some updates. Not a startup product'),
])
def test_status_notifications(status, notif_type, text):
    notifier = Notifier(RecordingSender())

    notification = notifier.compose_status_notification(make_pitch(), status, "Not a startup product")

    assert notification.type == notif_type
    assert notification.message == text
    assert notification.user_id == "founder-1"


def test_pending_has_no_status_notification():
    notifier = Notifier(RecordingSender())

    with pytest.raises(InvalidNotificationError):
        notifier.compose_status_notification(make_pitch(), ReviewStatus.PENDING)
    assert notifier.notify_status(make_pitch(), ReviewStatus.PENDING) is False


def test_notify_status_skips_pitches_without_founder():
    sender = RecordingSender()
    notifier = Notifier(sender)

    assert notifier.notify_status(make_pitch(founder_id=None), ReviewStatus.APPROVED) is False
    assert sender.notifications == []
