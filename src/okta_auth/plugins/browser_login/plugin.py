"""Playwright login provider -- open a browser, let the human sign in, keep the cookies.

The provider drives a headed Chromium window through the identity provider's
login page:

1. Seed the browsing context with any stored Okta cookies so that a
   partially valid session is reused without a prompt.
2. Open the target URL and wait for the network to settle.
3. If the page is an Okta sign-in challenge, optionally fill in the username
   (the only automated step; password and MFA always stay with the human)
   and wait, bounded by the request timeout, for the URL to leave the
   sign-in page.
4. Return every cookie in the context.

The browser and the Playwright driver are torn down in a ``finally`` block,
so nothing is left running after a timeout or an error.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page
from playwright.sync_api import TimeoutError as PlaywrightTimeout
from playwright.sync_api import sync_playwright

from okta_auth.auth.base import LoginProvider, LoginRequest
from okta_auth.exceptions import CaptureError, LoginTimeoutError
from okta_auth.models import Credential, domain_matches

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = ["--disable-blink-features=AutomationControlled"]
_NAVIGATION_TIMEOUT_MS = 60_000
_FIELD_TIMEOUT_MS = 10_000
_SIGNIN_MARKER = "signin"

# Okta Identity Engine sign-in widget
_USERNAME_SELECTOR = 'input[name="identifier"]'
_NEXT_SELECTOR = 'input[type="submit"][value="Next"]'


def is_login_challenge(url: str, idp_domains: Iterable[str]) -> bool:
    """Return True if *url* is an identity provider sign-in page."""
    host = urlparse(url).hostname or ""
    if _SIGNIN_MARKER not in url:
        return False
    return any(domain_matches(host, domain) for domain in idp_domains)


class PlaywrightLoginProvider(LoginProvider):
    """Interactive login through a Playwright-controlled Chromium window.

    Args:
        idp_domains: Host suffixes that identify the identity provider's
            sign-in pages.
        headless: Run without a visible window. Only useful when the seeded
            cookies are expected to be enough.
    """

    def __init__(
        self,
        idp_domains: Iterable[str] = ("okta.com",),
        headless: bool = False,
    ) -> None:
        self._idp_domains = tuple(idp_domains)
        self._headless = headless

    def capture(self, request: LoginRequest) -> list[Credential]:
        playwright: Any = None
        browser: Any = None
        context: Any = None
        try:
            playwright = sync_playwright().start()
            browser = playwright.chromium.launch(headless=self._headless, args=_LAUNCH_ARGS)
            context = browser.new_context()
            if request.seed:
                context.add_cookies([c.to_cookie() for c in request.seed])
            page = context.new_page()

            logger.info("Navigating to %s", request.target_url)
            page.goto(request.target_url, wait_until="networkidle", timeout=_NAVIGATION_TIMEOUT_MS)

            if is_login_challenge(page.url, self._idp_domains):
                logger.info("Okta login required")
                if request.username:
                    self._enter_username(page, request.username)
                else:
                    logger.warning(
                        "Please log in manually in the browser; waiting up to %ds",
                        request.timeout_seconds,
                    )
                self._wait_for_login(page, request.timeout_seconds)

            return [Credential.model_validate(cookie) for cookie in context.cookies()]
        except PlaywrightTimeout as exc:
            raise CaptureError(f"Timed out loading {request.target_url}: {exc}") from exc
        except PlaywrightError as exc:
            raise CaptureError(f"Browser error: {exc}") from exc
        finally:
            _close_quietly(context, browser, playwright)

    @staticmethod
    def _enter_username(page: Page, username: str) -> None:
        try:
            page.fill(_USERNAME_SELECTOR, username, timeout=_FIELD_TIMEOUT_MS)
            page.click(_NEXT_SELECTOR, timeout=_FIELD_TIMEOUT_MS)
            logger.info("Username entered. Please complete login manually.")
        except PlaywrightError as exc:
            logger.warning("Automated username entry failed, please log in manually: %s", exc)

    @staticmethod
    def _wait_for_login(page: Page, timeout_seconds: float) -> None:
        try:
            page.wait_for_url(
                lambda url: _SIGNIN_MARKER not in url,
                timeout=timeout_seconds * 1000,
            )
        except PlaywrightTimeout:
            raise LoginTimeoutError(
                f"Timed out after {timeout_seconds:g}s waiting for Okta login to complete"
            ) from None


def _close_quietly(context: Optional[Any], browser: Optional[Any], playwright: Optional[Any]) -> None:
    """Release Playwright resources, logging (not raising) any teardown failure."""
    for resource, closer in ((context, "close"), (browser, "close"), (playwright, "stop")):
        if resource is None:
            continue
        try:
            getattr(resource, closer)()
        except PlaywrightError as exc:
            logger.debug("Ignoring error during browser teardown: %s", exc)
