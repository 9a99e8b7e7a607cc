"""Challenge detection for the identity provider's login flow."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from playwright.async_api import Page

from ..constants import CHALLENGE_MARKERS, EMAIL_CODE_OPTION_SELECTOR
from ..models.session import ChallengeContext, ChallengeKind

logger = logging.getLogger(__name__)

# Checked in order; the first option present on the page wins
VERIFICATION_OPTIONS: dict[ChallengeKind, str] = {
    ChallengeKind.EMAIL_CODE: EMAIL_CODE_OPTION_SELECTOR,
}


def verification_options(email_code_selector: Optional[str] = None) -> dict[ChallengeKind, str]:
    """Return the detection table, optionally overriding the email-code selector."""
    options = dict(VERIFICATION_OPTIONS)
    if email_code_selector:
        options[ChallengeKind.EMAIL_CODE] = email_code_selector
    return options


async def _is_present(page: Page, selector: str) -> bool:
    try:
        return await page.query_selector(selector) is not None
    except Exception as e:
        logger.debug(f"Selector query failed for {selector!r}: {e}")
        return False


async def find_markers(page: Page, markers: tuple[str, ...] = CHALLENGE_MARKERS) -> list[str]:
    """Return the challenge markers currently present on the page."""
    found = []
    for selector in markers:
        if await _is_present(page, selector):
            found.append(selector)
    return found


async def detect_challenge(
    page: Page,
    options: Mapping[ChallengeKind, str] = VERIFICATION_OPTIONS,
    markers: tuple[str, ...] = CHALLENGE_MARKERS,
) -> ChallengeContext:
    """Classify the step shown after the identifier was submitted.

    Returns:
        ChallengeContext with kind:
        - NONE: no challenge marker, the password prompt is expected
        - a known kind: a marker is present and that option can be selected
        - UNKNOWN: a marker is present but no known option is on the page
    """
    found = await find_markers(page, markers)
    if not found:
        return ChallengeContext(kind=ChallengeKind.NONE)

    logger.info(f"Challenge markers detected: {found}")
    for kind, selector in options.items():
        if await _is_present(page, selector):
            logger.info(f"Verification option available: {kind.value}")
            return ChallengeContext(kind=kind, markers=found, option_selector=selector)

    logger.warning("Challenge shown but no known verification option is present.")
    return ChallengeContext(kind=ChallengeKind.UNKNOWN, markers=found)
