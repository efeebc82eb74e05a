"""
wagateway CLI main module.

Development and production server commands plus an API key hashing helper.
"""

import subprocess
import sys
from typing import Optional

import typer

from wagateway.auth.api_key import hash_api_key
from wagateway.core.config.settings import Settings
from wagateway.core.exceptions import ConfigurationError

app = typer.Typer(help="wagateway WhatsApp Cloud API gateway CLI")

ASGI_APP = "wagateway.main:app"


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigurationError as e:
        typer.echo(f"❌ Configuration error: {e.message}", err=True)
        typer.echo("Set the variable in the environment or in .env", err=True)
        raise typer.Exit(1) from e


def _run_uvicorn(cmd: list[str], mode: str) -> None:
    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        typer.echo(
            f"❌ {mode.capitalize()} server failed to start (exit code: {e.returncode})",
            err=True,
        )
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        typer.echo(f"👋 {mode.capitalize()} server stopped")


@app.command()
def dev(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to bind to (default: PORT)"
    ),
):
    """
    Run development server with auto-reload.

    Examples:
        wagateway dev
        wagateway dev --port 8080
    """
    settings = _load_settings()
    port = port or settings.port

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        ASGI_APP,
        "--reload",
        "--host",
        host,
        "--port",
        str(port),
    ]

    typer.echo("🚀 Starting wagateway development server...")
    typer.echo(f"🌐 Server: http://{host}:{port}{settings.api_prefix}")
    typer.echo(f"📝 Docs: http://{host}:{port}/docs")
    typer.echo("💡 Press CTRL+C to stop")
    typer.echo()

    _run_uvicorn(cmd, "development")


@app.command()
def run(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to bind to (default: PORT)"
    ),
    workers: int = typer.Option(
        1, "--workers", "-w", help="Number of worker processes"
    ),
):
    """
    Run production server (no auto-reload).

    Examples:
        wagateway run
        wagateway run --workers 4 --port 8080
    """
    settings = _load_settings()
    port = port or settings.port

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        ASGI_APP,
        "--host",
        host,
        "--port",
        str(port),
        "--workers",
        str(workers),
    ]

    typer.echo("🚀 Starting wagateway production server...")
    typer.echo(f"🌐 Server: http://{host}:{port}{settings.api_prefix}")
    typer.echo(f"👥 Workers: {workers}")
    typer.echo()

    _run_uvicorn(cmd, "production")


@app.command("hash-key")
def hash_key(
    api_key: str = typer.Argument(..., help="Raw API key handed to an integrator"),
):
    """
    Print the SHA-256 digest clients present and AUTH_API_KEY_HASHES allow-lists.

    Examples:
        wagateway hash-key "my-secret-key"
    """
    typer.echo(hash_api_key(api_key))


if __name__ == "__main__":
    app()
