"""Playwright-driven interactive Okta login.

Implements :class:`~okta_auth.auth.base.LoginProvider` by opening a real
Chromium window, letting the user complete the identity provider's login
page, and returning every cookie from the browsing context.

See Also:
    :class:`~okta_auth.plugins.browser_login.plugin.PlaywrightLoginProvider`
"""

from okta_auth.plugins.browser_login.plugin import PlaywrightLoginProvider

__all__ = ["PlaywrightLoginProvider"]
