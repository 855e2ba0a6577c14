"""CLI commands for stickerbot."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stickerbot import __logo__, __version__

app = typer.Typer(
    name="stickerbot",
    help=f"{__logo__} stickerbot - turns captioned media into stickers",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} stickerbot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """stickerbot - turns captioned media into stickers."""
    pass


def _build_controller(config, session_factory):
    """Wire the message pipeline and connection controller from config."""
    from stickerbot.auth.credentials import FileCredentialStore
    from stickerbot.media.sticker import AnimatedStickerEncoder, StaticStickerEncoder
    from stickerbot.media.video import FfmpegTranscoder
    from stickerbot.messages.classifier import Classifier
    from stickerbot.messages.dispatcher import Dispatcher
    from stickerbot.messages.handler import MessageHandler
    from stickerbot.messages.pending import PendingBuffer
    from stickerbot.session.base import SessionOptions
    from stickerbot.session.controller import SessionController
    from stickerbot.session.qr import TerminalQRRenderer

    sticker = config.sticker
    dispatcher = Dispatcher(
        static_encoder=StaticStickerEncoder(size=sticker.size),
        animated_encoder=AnimatedStickerEncoder(
            FfmpegTranscoder(sticker.ffmpeg_path),
            size=sticker.size,
            tmp_dir=Path(sticker.tmp_dir).expanduser() if sticker.tmp_dir else None,
        ),
    )
    handler = MessageHandler(
        dispatcher=dispatcher,
        classifier=Classifier(config.keywords, sticker),
        pending=PendingBuffer(config.timing.pending_timeout_s),
    )
    return SessionController(
        session_factory=session_factory,
        credential_store=FileCredentialStore(config.auth_path),
        handler=handler,
        qr_renderer=TerminalQRRenderer(),
        options=SessionOptions(browser=tuple(config.session.browser)),
        reconnect_delay_s=config.timing.reconnect_delay_s,
    )


# ============================================================================
# Run
# ============================================================================


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
):
    """Connect to the chat session and start answering messages."""
    from stickerbot.config.loader import load_config
    from stickerbot.logging_setup import setup_logging
    from stickerbot.session.resolve import SessionFactoryError, resolve_session_factory

    config = load_config(config_path)
    level = "DEBUG" if verbose else config.logging.level
    log_path = setup_logging(level, config.logging.file)

    try:
        factory = resolve_session_factory(config.session.factory)
    except SessionFactoryError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"{__logo__} Starting stickerbot (auth: {config.auth_path})")
    if log_path:
        console.print(f"[dim]Logging to {log_path}[/dim]")

    controller = _build_controller(config, factory)

    try:
        code = asyncio.run(controller.run())
    except KeyboardInterrupt:
        console.print("\nShutting down...")
        code = 0
    except Exception as e:
        console.print(f"[red]Failed to start: {e}[/red]")
        code = 1

    raise typer.Exit(code)


# ============================================================================
# Status / Logout
# ============================================================================


@app.command()
def status(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Show configuration and backend availability."""
    from stickerbot.auth.credentials import FileCredentialStore
    from stickerbot.config.loader import get_config_path, load_config
    from stickerbot.media.video import FfmpegTranscoder

    path = config_path or get_config_path()
    config = load_config(config_path)
    store = FileCredentialStore(config.auth_path)
    transcoder = FfmpegTranscoder(config.sticker.ffmpeg_path)

    table = Table(title=f"{__logo__} stickerbot status")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Config", f"{path} {'[green]✓[/green]' if path.exists() else '[dim](defaults)[/dim]'}")
    table.add_row("Session factory", config.session.factory or "[red]not set[/red]")
    table.add_row(
        "Auth dir",
        f"{config.auth_path} {'[green]logged in[/green]' if store.exists() else '[yellow]no credentials[/yellow]'}",
    )
    table.add_row(
        "ffmpeg",
        f"[green]{transcoder.ffmpeg_path}[/green]" if transcoder.available else "[yellow]not found (animated stickers disabled)[/yellow]",
    )
    table.add_row("Sticker marker", config.sticker.marker)
    table.add_row("Sticker size", f"{config.sticker.size}x{config.sticker.size}")
    table.add_row("Pending timeout", f"{config.timing.pending_timeout_s:g}s")
    table.add_row("Reconnect delay", f"{config.timing.reconnect_delay_s:g}s")

    console.print(table)


@app.command()
def logout(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Remove stored credentials so the next run asks for a new login."""
    from stickerbot.auth.credentials import FileCredentialStore
    from stickerbot.config.loader import load_config

    config = load_config(config_path)
    store = FileCredentialStore(config.auth_path)

    if not config.auth_path.exists():
        console.print(f"[dim]Nothing to remove at {config.auth_path}[/dim]")
        return

    if not yes and not typer.confirm(f"Remove {config.auth_path}?"):
        raise typer.Exit()

    store.clear()
    console.print(f"[green]✓[/green] Removed {config.auth_path}")


if __name__ == "__main__":
    app()
