"""okta_auth -- centralized Okta SSO session capture for MCP tools.

This package captures a browser-based single sign-on session once and hands
the resulting cookies to every downstream tool that needs them. Sessions are
cached on disk per scope (the shared identity-provider scope plus one scope
per registered service) and reused until they go stale, at which point an
interactive browser login is triggered again.

Typical workflow::

    okta-auth login datahub   # open a browser, complete SSO
    okta-auth status          # inspect cached sessions
    okta-auth serve           # expose the same operations as MCP tools

Modules:
    app: Typer application factory and CLI entry point.
    catalog: Registry of downstream services.
    models: Pydantic models shared across the package.
    config: Settings file, environment precedence, atomic writes.
    server: MCP stdio server exposing the session operations as tools.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "1.0.0"
