"""Tests for challenge detection."""

import pytest

from form_gateway.constants import EMAIL_CODE_OPTION_SELECTOR
from form_gateway.models.session import ChallengeKind
from form_gateway.session_manager.challenge import (
    VERIFICATION_OPTIONS,
    detect_challenge,
    find_markers,
    verification_options,
)

from conftest import FakePage


class RaisingPage(FakePage):
    async def query_selector(self, selector):
        if selector == "#challenge":
            raise RuntimeError("Execution context was destroyed")
        return await super().query_selector(selector)


class TestDetectChallenge:

    @pytest.mark.asyncio
    async def test_password_prompt_is_no_challenge(self):
        page = FakePage(present={"#passwordNext"})
        context = await detect_challenge(page)
        assert context.kind is ChallengeKind.NONE
        assert context.detected is False
        assert context.markers == []

    @pytest.mark.asyncio
    async def test_email_option_detected(self):
        page = FakePage(present={"#challenge", EMAIL_CODE_OPTION_SELECTOR})
        context = await detect_challenge(page)
        assert context.kind is ChallengeKind.EMAIL_CODE
        assert context.option_selector == EMAIL_CODE_OPTION_SELECTOR
        assert context.markers == ["#challenge"]

    @pytest.mark.asyncio
    async def test_class_marker_counts_as_challenge(self):
        page = FakePage(present={".d2CFce", EMAIL_CODE_OPTION_SELECTOR})
        context = await detect_challenge(page)
        assert context.kind is ChallengeKind.EMAIL_CODE
        assert context.markers == [".d2CFce"]

    @pytest.mark.asyncio
    async def test_marker_without_known_option_is_unknown(self):
        page = FakePage(present={"#challenge", 'div[data-challengetype="39"]'})
        context = await detect_challenge(page)
        assert context.kind is ChallengeKind.UNKNOWN
        assert context.detected is True
        assert context.option_selector is None

    @pytest.mark.asyncio
    async def test_custom_option_selector(self):
        options = verification_options('li[data-method="email"]')
        page = FakePage(present={"#challenge", 'li[data-method="email"]'})
        context = await detect_challenge(page, options)
        assert context.kind is ChallengeKind.EMAIL_CODE
        assert context.option_selector == 'li[data-method="email"]'

    @pytest.mark.asyncio
    async def test_query_error_treated_as_absent(self):
        page = RaisingPage(present={"#challenge", ".d2CFce"})
        assert await find_markers(page) == [".d2CFce"]


def test_verification_options_default_table_untouched():
    options = verification_options()
    assert options == VERIFICATION_OPTIONS
    options[ChallengeKind.EMAIL_CODE] = "changed"
    assert VERIFICATION_OPTIONS[ChallengeKind.EMAIL_CODE] == EMAIL_CODE_OPTION_SELECTOR
