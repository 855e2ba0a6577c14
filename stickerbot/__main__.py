"""Entry point for running stickerbot as a module: python -m stickerbot"""

from stickerbot.cli.commands import app

if __name__ == "__main__":
    app()
