"""Tests for Stage 1: the deterministic intake gate."""
from __future__ import annotations

import pytest

from conftest import FakeProbe, make_pitch
from pitch_review.models.review_config import create_default_review_config
from pitch_review.models.schemas import ProbeOutcome
from pitch_review.services.url_probe import UrlProbe
from pitch_review.stages.stage1_intake import IntakeGateStage


def run_gate(pitch, probe=None, config=None):
    stage = IntakeGateStage(config or create_default_review_config(), probe=probe or FakeProbe())
    return stage.process(pitch)


# ---------------------------------------------------------------------------
# Product URL
# ---------------------------------------------------------------------------

def test_clean_pitch_collects_every_deterministic_point():
    result = run_gate(make_pitch())

    # url 20 + live 10 + completeness 20 + problem 10 + category 10
    assert result.score_delta == 70
    assert result.flags == []
    assert result.auto_approve_eligible is True
    assert result.completed_fields == 6


@pytest.mark.parametrize("url", [None, "", "   "])
def test_missing_url_blocks_auto_approve(url):
    result = run_gate(make_pitch(product_url=url))

    assert "no_product_url" in result.flags
    assert result.auto_approve_eligible is False
    # no URL points, and completeness drops to 5/6 -> 16
    assert result.score_delta == 10 + 16 + 10 + 10


@pytest.mark.parametrize("url", ["not a url", "ftp://files.example.com/app", "https://"])
def test_malformed_url_is_flagged_invalid(url):
    result = run_gate(make_pitch(product_url=url), probe=UrlProbe())

    assert "invalid_product_url" in result.flags
    assert "product_url_not_accessible" not in result.flags
    assert result.auto_approve_eligible is False


def test_unreachable_url_is_flagged_not_accessible():
    result = run_gate(make_pitch(), probe=FakeProbe(ProbeOutcome.UNREACHABLE))

    assert result.flags == ["product_url_not_accessible"]
    assert result.auto_approve_eligible is False
    assert result.score_delta == 50


class ExplodingProbe:
    def probe(self, url):
        raise RuntimeError("resolver crashed")


def test_probe_that_raises_still_completes_the_gate():
    result = run_gate(make_pitch(), probe=ExplodingProbe())

    assert result.flags == ["product_url_not_accessible"]
    assert result.auto_approve_eligible is False
    assert result.score_delta == 50


def test_empty_host_label_still_completes_the_gate():
    result = run_gate(make_pitch(product_url="http://a..b.com"), probe=UrlProbe(timeout=2))

    # The idna codec refuses the empty label before any packet is sent
    assert "invalid_product_url" in result.flags or "product_url_not_accessible" in result.flags
    assert result.auto_approve_eligible is False


def test_error_status_is_flagged_not_accessible():
    result = run_gate(make_pitch(), probe=FakeProbe(ProbeOutcome.BAD_STATUS, status_code=404))

    assert result.flags == ["product_url_not_accessible"]
    assert result.probe.status_code == 404


@pytest.mark.parametrize("url", [
    "https://www.linkedin.com/company/ledgerly",
    "https://x.com/ledgerly",
    "https://m.facebook.com/ledgerly",
])
def test_social_media_url_is_suspicious_but_allowed(url):
    result = run_gate(make_pitch(product_url=url))

    assert "social_media_url" in result.flags
    assert result.auto_approve_eligible is True
    assert result.score_delta == 60


def test_social_media_match_is_by_host_not_substring():
    result = run_gate(make_pitch(product_url="https://dropbox.com/ledgerly"))

    assert "social_media_url" not in result.flags


def test_social_media_penalty_applies_when_host_answers_with_error():
    result = run_gate(
        make_pitch(product_url="https://twitter.com/ledgerly"),
        probe=FakeProbe(ProbeOutcome.BAD_STATUS, status_code=403),
    )

    assert result.flags == ["product_url_not_accessible", "social_media_url"]
    assert result.score_delta == 50 - 10


# ---------------------------------------------------------------------------
# Liveness, completeness, depth, category
# ---------------------------------------------------------------------------

def test_product_not_live_blocks_auto_approve():
    result = run_gate(make_pitch(is_product_live=False))

    assert result.flags == ["product_not_live"]
    assert result.auto_approve_eligible is False
    assert result.score_delta == 60


def test_completeness_is_floored():
    # 4 of 6 fields: 20 * 4 / 6 = 13.33 -> 13
    result = run_gate(make_pitch(product_stage="  ", one_liner=""))

    assert result.completed_fields == 4
    assert result.score_delta == 20 + 10 + 13 + 10 + 10


def test_short_problem_is_informational_only():
    result = run_gate(make_pitch(what_problem_do_you_solve="Invoices are hard."))

    assert result.flags == ["problem_description_too_short"]
    assert result.auto_approve_eligible is True
    assert result.score_delta == 60


def test_problem_of_exactly_fifty_characters_is_deep_enough():
    result = run_gate(make_pitch(what_problem_do_you_solve="x" * 50))

    assert "problem_description_too_short" not in result.flags


@pytest.mark.parametrize("category", ["Other", "", None])
def test_generic_category_earns_nothing(category):
    result = run_gate(make_pitch(category=category))

    assert result.score_delta < 70


# ---------------------------------------------------------------------------
# Lexical heuristics
# ---------------------------------------------------------------------------

def test_scam_terms_penalize_and_block():
    result = run_gate(make_pitch(one_liner="Guaranteed Returns for every baker"))

    assert "scam_indicators" in result.flags
    assert result.auto_approve_eligible is False
    assert result.score_delta == 70 - 30


def test_hype_terms_penalize_without_blocking():
    result = run_gate(make_pitch(one_liner="The revolutionary platform for bakeries"))

    assert result.flags == ["vague_description"]
    assert result.auto_approve_eligible is True
    assert result.score_delta == 60


def test_service_business_is_not_a_startup_product():
    result = run_gate(make_pitch(startup_name="Ledgerly Consulting"))

    assert "not_a_startup_product" in result.flags
    assert result.auto_approve_eligible is False
    assert result.score_delta == 70


def test_shouting_costs_ten_points():
    loud = make_pitch(
        startup_name="LEDGERLY",
        one_liner="BOOKKEEPING AUTOMATION FOR INDEPENDENT BAKERIES",
        what_problem_do_you_solve="SMALL BAKERIES LOSE HOURS EVERY WEEK RECONCILING SUPPLIER INVOICES",
    )
    quiet = make_pitch(
        startup_name=loud.startup_name.lower(),
        one_liner=loud.one_liner.lower(),
        what_problem_do_you_solve=loud.what_problem_do_you_solve.lower(),
    )

    loud_result = run_gate(loud)
    quiet_result = run_gate(quiet)

    assert "excessive_caps" in loud_result.flags
    assert "excessive_caps" not in quiet_result.flags
    assert loud_result.score_delta == quiet_result.score_delta - 10


def test_short_acronyms_do_not_count_as_shouting():
    result = run_gate(make_pitch(one_liner="AI OCR API for SMB bakeries"))

    assert "excessive_caps" not in result.flags


def test_extra_keywords_from_config():
    config = create_default_review_config(extra_scam_keywords=["double your money"])
    result = run_gate(make_pitch(one_liner="Double your money with bread"), config=config)

    assert "scam_indicators" in result.flags
