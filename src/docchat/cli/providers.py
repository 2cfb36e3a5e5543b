"""Factory functions for the CLI.

Centralizes creation of the API client and session store from environment
variables. Hides configuration details from command implementations.
"""

import os

from rich.console import Console

from ..client import DEFAULT_BASE_URL, ChatApiClient, ClientConfig
from ..session import SessionStore, create_session_store

# Default console for output
_console = Console()


def get_client_config(console: Console | None = None) -> ClientConfig:
    """Build the API client configuration from environment variables.

    Environment variables:
        DOCCHAT_API_URL: API root URL (default: http://127.0.0.1:5000)
        DOCCHAT_TIMEOUT: Request timeout in seconds (default: 60)
    """
    import typer

    con = console or _console
    timeout_raw = os.getenv("DOCCHAT_TIMEOUT", "60")
    try:
        timeout = float(timeout_raw)
    except ValueError:
        timeout = -1.0
    if timeout <= 0:
        con.print(f"[red]Error: DOCCHAT_TIMEOUT must be a positive number, got '{timeout_raw}'[/red]")
        raise typer.Exit(code=1)

    return ClientConfig(
        base_url=os.getenv("DOCCHAT_API_URL", DEFAULT_BASE_URL),
        timeout=timeout,
    )


def get_client(console: Console | None = None) -> ChatApiClient:
    """Create the API client from environment variables."""
    return ChatApiClient(get_client_config(console))


def get_session_store(console: Console | None = None) -> SessionStore:
    """Create the anonymous session store from environment variables.

    Environment variables:
        DOCCHAT_SESSION_BACKEND: 'file' (persistent, default) or 'memory'
        DOCCHAT_SESSION_PATH: Session file path (only with 'file')
    """
    import typer

    con = console or _console
    backend = os.getenv("DOCCHAT_SESSION_BACKEND", "file").lower()
    options = {}
    path = os.getenv("DOCCHAT_SESSION_PATH")
    if backend == "file" and path:
        options["path"] = path

    try:
        return create_session_store(backend, **options)
    except ValueError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def require_user_id(user_id: str | None, console: Console | None = None) -> str:
    """Resolve the user id from the option or DOCCHAT_USER_ID.

    Raises:
        SystemExit: If no user id is configured
    """
    import typer

    con = console or _console
    resolved = user_id or os.getenv("DOCCHAT_USER_ID")
    if not resolved:
        con.print("[red]Error: pass --user or set DOCCHAT_USER_ID[/red]")
        raise typer.Exit(code=1)
    return resolved


def get_log_level() -> str | None:
    """Log level name from DOCCHAT_LOG_LEVEL, if set."""
    return os.getenv("DOCCHAT_LOG_LEVEL")
