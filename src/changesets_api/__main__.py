"""Command line entry point for ``python -m changesets_api``."""

from __future__ import annotations

from datetime import timedelta

import typer
import uvicorn

from changesets_api.core.security import create_access_token
from changesets_api.settings import Settings

DEFAULT_BIND_HOST = "127.0.0.1"
DEFAULT_BIND_PORT = 8000

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Customize changesets API (start, token).",
)


@app.command("start")
def start(
    host: str = typer.Option(DEFAULT_BIND_HOST, help="Interface to bind."),
    port: int = typer.Option(DEFAULT_BIND_PORT, help="Port to bind."),
    reload: bool = typer.Option(False, help="Reload on source changes."),
) -> None:
    """Serve the API with uvicorn."""

    settings = Settings()
    typer.echo(f"Starting changesets API on http://{host}:{port}")
    uvicorn.run(
        "changesets_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("token")
def token(
    user_id: int = typer.Argument(..., help="User id placed in the token subject."),
    minutes: int | None = typer.Option(None, help="Lifetime; defaults to the configured expiry."),
) -> None:
    """Print a bearer token for USER_ID."""

    settings = Settings()
    lifetime = minutes if minutes is not None else settings.access_token_expire_minutes
    typer.echo(
        create_access_token(
            user_id,
            secret=settings.secret_key_value,
            algorithm=settings.algorithm,
            expires_delta=timedelta(minutes=lifetime),
        )
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
