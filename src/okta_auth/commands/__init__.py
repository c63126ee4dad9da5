"""Built-in CLI commands for okta-auth.

* :mod:`~okta_auth.commands.session` -- ``login``, ``status``, ``token``,
  ``refresh``, ``copy``, ``clear`` and ``services``, each a thin wrapper over
  one :class:`~okta_auth.auth.manager.SessionManager` operation.
* :mod:`~okta_auth.commands.config` -- view and modify the settings file.

Session commands are plain callbacks registered directly on the root app;
``config`` is a :class:`typer.Typer` sub-application.
"""
