"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~okta_auth.exceptions.OktaAuthError` subclass.
Shell wrappers around ``okta-auth`` can inspect the exit code to decide
whether to re-run an interactive login without parsing stderr.

Example::

    $ okta-auth token splunk
    $ echo $?
    4   # EXIT_UNKNOWN_SERVICE -- the key is not in the catalog
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The operation completed but reported an authentication failure."""

EXIT_UNKNOWN_SERVICE = 4
"""The requested service key is not registered in the catalog."""

EXIT_NO_SESSION = 5
"""No identity-provider session is stored."""

EXIT_LOGIN_TIMEOUT = 6
"""The interactive login was not completed within the allowed time."""

EXIT_STORAGE_FAILURE = 7
"""Credentials could not be written to or removed from disk."""

EXIT_CAPTURE_FAILURE = 8
"""The browser failed while capturing the session."""

EXIT_STARTUP_FAILURE = 10
"""The MCP server could not start its transport."""
