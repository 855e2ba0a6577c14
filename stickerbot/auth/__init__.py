"""Session credential storage."""

from stickerbot.auth.credentials import CredentialStore, FileCredentialStore

__all__ = ["CredentialStore", "FileCredentialStore"]
