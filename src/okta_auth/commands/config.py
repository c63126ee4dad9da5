"""Config commands -- view and modify the settings file.

Provides the ``okta-auth config`` sub-command group for reading, updating,
and resetting :class:`~okta_auth.models.AuthSettings`. The file lives in the
okta-auth config directory; ``MCP_AUTH_*`` environment variables still take
precedence over whatever is saved here.
"""

from __future__ import annotations

import json

import typer

from okta_auth.exceptions import OktaAuthError
from okta_auth.exit_codes import EXIT_INVALID_USAGE
from okta_auth.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the effective settings (file plus environment overrides).

    Example::

        okta-auth config show
        okta-auth config show --json
    """
    from okta_auth.config import get_auth_dir, get_config_dir, load_settings

    try:
        settings = load_settings()
    except OktaAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    info(f"Credential store: {get_auth_dir(settings)}")
    format_response(settings.model_dump(mode="json", by_alias=True))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting name, e.g. 'login_timeout_seconds'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a scalar setting.

    The value is coerced to the current field's type (bool or int);
    list settings accept a JSON array. The result is validated against
    :class:`~okta_auth.models.AuthSettings` before saving.

    Example::

        okta-auth config set login_timeout_seconds 300
        okta-auth config set headless true
        okta-auth config set idp_domains '["okta.com", "example.com"]'
    """
    from okta_auth.config import load_settings_file, save_settings
    from okta_auth.models import AuthSettings

    try:
        settings = load_settings_file()
    except OktaAuthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = settings.model_dump(mode="json", by_alias=True)

    if key not in data:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = data[key]
    coerced: object
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    elif isinstance(current, list):
        try:
            coerced = json.loads(value)
        except json.JSONDecodeError:
            error(f"Expected a JSON array for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    else:
        coerced = value

    data[key] = coerced

    try:
        new_settings = AuthSettings.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_settings(new_settings)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset settings to defaults.

    Asks for confirmation unless ``--force`` is active. Stored credentials
    are not touched; use ``okta-auth clear`` for that.

    Example::

        okta-auth config reset
        okta-auth --force config reset
    """
    from okta_auth.config import save_settings
    from okta_auth.models import AuthSettings

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all settings to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_settings(AuthSettings())
    success("Configuration reset to defaults.")
