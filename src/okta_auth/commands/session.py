"""Session commands -- log in, inspect, and clear the shared Okta session.

Every command builds a manager with
:func:`~okta_auth.auth.create_default_manager`, runs one operation, and
reports the result: the payload goes to stdout (JSON with ``--json``), the
message to stderr. Typed errors exit with their ``exit_code``; an operation
that completes with ``success=False`` exits with
:data:`~okta_auth.exit_codes.EXIT_AUTH_FAILURE`.

Typical workflow::

    okta-auth status          # what is stored and still valid
    okta-auth login datahub   # opens a browser only if needed
    okta-auth token splunk --json | jq -r .token
"""

from __future__ import annotations

from typing import NoReturn, Optional

import typer

from okta_auth.auth import create_default_manager
from okta_auth.auth.manager import CLEAR_ALL, SessionManager
from okta_auth.exceptions import OktaAuthError
from okta_auth.exit_codes import EXIT_AUTH_FAILURE
from okta_auth.models import AuthResult, Credential
from okta_auth.output import OutputFormat, error, format_response, get_output, info, success, suggest


def _manager() -> SessionManager:
    try:
        return create_default_manager()
    except OktaAuthError as exc:
        _fail(exc)


def _fail(exc: OktaAuthError) -> NoReturn:
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def _report(result: AuthResult) -> None:
    """Print *result* and exit non-zero when it reports a failure."""
    if get_output().format == OutputFormat.JSON:
        format_response(result.to_payload())
    if not result.success:
        error(result.message)
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    success(result.message)


def _format_expiry(credential: Credential) -> str:
    expires = credential.expires_at
    return expires.isoformat() if expires is not None else "session"


def login_command(
    service: Optional[str] = typer.Argument(
        None, help="Service to authenticate with. Omit for Okta only."
    ),
    username: Optional[str] = typer.Option(
        None,
        "--username",
        "-u",
        envvar="OKTA_USERNAME",
        help="Okta username to pre-fill. Password and MFA stay manual.",
    ),
    force_refresh: bool = typer.Option(
        False, "--force-refresh", help="Log in again even if the session is valid."
    ),
) -> None:
    """Authenticate with Okta, opening a browser only when needed.

    Reuses the stored Okta session when it is still valid. Otherwise a
    Chromium window opens on the service (or Okta) login page and waits for
    you to finish signing in.

    Example::

        okta-auth login
        okta-auth login datahub -u jane.doe@example.com
    """
    manager = _manager()
    if force_refresh or not manager.check_auth_status().okta.authenticated:
        info("Opening a browser for Okta login. Complete sign-in in the browser window.")
    try:
        result = manager.authenticate(service, username=username, force_refresh=force_refresh)
    except OktaAuthError as exc:
        _fail(exc)
    _report(result)
    if result.token:
        info(f"Token: {result.token[:40]}...")


def status_command() -> None:
    """Show Okta and per-service authentication status.

    Example::

        okta-auth status
        okta-auth status --json
    """
    manager = _manager()
    status = manager.check_auth_status()

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response(status.to_payload())
    else:
        expires = status.okta.expires_at.isoformat() if status.okta.expires_at else "-"
        rows = [["okta", _yes_no(status.okta.authenticated), "-", expires]]
        for key, service_status in status.services.items():
            rows.append(
                [
                    key,
                    _yes_no(service_status.authenticated),
                    _yes_no(service_status.has_service_cookies),
                    "-",
                ]
            )
        output.print_table(
            ["Scope", "Authenticated", "Service Cookies", "Expires"],
            rows,
            title="Authentication Status",
        )

    missing = [key for key, s in status.services.items() if not s.has_service_cookies]
    if not status.okta.authenticated:
        suggest("Authenticate: okta-auth login")
        for key in status.services:
            suggest(f"Or for a specific service: okta-auth login {key}")
    elif missing:
        for key in missing:
            suggest(f"Capture {key} cookies: okta-auth login {key} --force-refresh")
    else:
        success("All services authenticated.")


def token_command(
    service: str = typer.Argument(help="Service whose stored credentials to print."),
) -> None:
    """Print the stored cookies (and token, for token services) of a service.

    Example::

        okta-auth token splunk
        okta-auth token datahub --json
    """
    manager = _manager()
    try:
        result = manager.get_service_token(service)
    except OktaAuthError as exc:
        _fail(exc)

    output = get_output()
    if output.format == OutputFormat.JSON or not result.success:
        _report(result)
        return

    output.print_table(
        ["Name", "Domain", "Expires", "Value"],
        [[c.name, c.domain, _format_expiry(c), c.value] for c in result.cookies],
        title=f"{result.service} credentials",
    )
    if result.token is not None:
        output.print_data(result.token)
    success(result.message)


def refresh_command() -> None:
    """Log in again only if the stored Okta session is missing or expired.

    Example::

        okta-auth refresh
    """
    manager = _manager()
    try:
        result = manager.refresh_session()
    except OktaAuthError as exc:
        _fail(exc)
    _report(result)


def copy_command(
    from_service: str = typer.Argument(help="Service that already has a session."),
    to_service: str = typer.Argument(help="Service whose legacy cookie file to write."),
) -> None:
    """Copy the Okta session into another service's legacy cookie file.

    Example::

        okta-auth copy datahub zeppelin
    """
    manager = _manager()
    try:
        result = manager.copy_session(from_service, to_service)
    except OktaAuthError as exc:
        _fail(exc)
    _report(result)
    if result.legacy_path:
        info(f"Written to {result.legacy_path}")
    else:
        info(f"No legacy cookie file was written for {result.service}.")


def clear_command(
    ctx: typer.Context,
    service: Optional[str] = typer.Argument(
        None, help="Service to clear, or 'all' (default) for everything."
    ),
) -> None:
    """Remove stored authentication for one service or for everything.

    Asks for confirmation unless ``--force`` is active.

    Example::

        okta-auth clear datahub
        okta-auth --force clear all
    """
    manager = _manager()
    target = service or CLEAR_ALL
    clear_all = target.strip().lower() == CLEAR_ALL
    if not clear_all:
        try:
            manager.catalog.require(target)
        except OktaAuthError as exc:
            _fail(exc)

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        prompt = (
            "Clear ALL stored authentication?"
            if clear_all
            else f'Clear stored authentication for "{target}"?'
        )
        if not typer.confirm(prompt):
            info("Cancelled.")
            raise typer.Exit()

    try:
        result = manager.clear_auth(target)
    except OktaAuthError as exc:
        _fail(exc)
    _report(result)


def services_command() -> None:
    """List the registered services.

    Example::

        okta-auth services
        okta-auth services --json
    """
    manager = _manager()
    descriptors = manager.list_services()

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response([d.to_payload() for d in descriptors])
        return
    output.print_table(
        ["Key", "Name", "Session", "URL", "Legacy Path"],
        [
            [d.key, d.name, d.session_type.value, d.url, d.legacy_path or "-"]
            for d in descriptors
        ],
        title="Registered Services",
    )


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"
