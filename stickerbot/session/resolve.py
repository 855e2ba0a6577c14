"""Session factory resolution from an import path."""

import importlib

from stickerbot.session.base import SessionFactory


class SessionFactoryError(ValueError):
    """Raised when the configured session factory cannot be loaded."""


def resolve_session_factory(path: str) -> SessionFactory:
    """Import a session factory given as ``"package.module:attribute"``.

    The attribute may be dotted (``"pkg.mod:Client.connect"``).
    """
    if not path:
        raise SessionFactoryError(
            "No session factory configured. Set session.factory in "
            "~/.stickerbot/config.json or STICKERBOT_SESSION__FACTORY."
        )

    module_name, sep, attr_path = path.partition(":")
    if not sep or not module_name or not attr_path:
        raise SessionFactoryError(
            f"Invalid session factory '{path}': expected 'module:attribute'"
        )

    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise SessionFactoryError(f"Cannot import '{module_name}': {e}") from e

    for name in attr_path.split("."):
        try:
            target = getattr(target, name)
        except AttributeError as e:
            raise SessionFactoryError(
                f"'{module_name}' has no attribute '{attr_path}'"
            ) from e

    if not callable(target):
        raise SessionFactoryError(f"Session factory '{path}' is not callable")

    return target
