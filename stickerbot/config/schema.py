"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SessionConfig(BaseModel):
    """Chat session configuration."""
    factory: str = ""  # Import path of the session factory, e.g. "mypkg.whatsapp:connect"
    auth_dir: str = "./auth"  # Where the credential store keeps login state
    browser: list[str] = Field(default_factory=lambda: ["WhatsApp Bot", "Windows", "20"])


class KeywordsConfig(BaseModel):
    """Keyword replies (case-insensitive regular expressions)."""
    door: str = "porta"
    confirm: str = "confirma"
    for_: str = Field(default="para", alias="for")
    ack_reply: str = "pego"
    confirmation_reply: str = "eh apenas uma mensagem de confirmacao, ignorar"
    confirmation_reply_enabled: bool = False  # Confirmations are only logged unless enabled

    model_config = {"populate_by_name": True}


class StickerConfig(BaseModel):
    """Sticker conversion configuration."""
    marker: str = "#s"  # Caption token requesting a sticker
    size: int = 512
    ffmpeg_path: str | None = None  # Defaults to ffmpeg on PATH
    tmp_dir: str | None = None  # Defaults to the system temp directory


class TimingConfig(BaseModel):
    """Timers."""
    pending_timeout_s: float = 8.0  # How long a content-less event waits for its retry
    reconnect_delay_s: float = 5.0


class LoggingConfig(BaseModel):
    """Log output."""
    level: str = "INFO"
    file: bool = False  # Also write to ~/.stickerbot/logs/stickerbot.log


class Config(BaseSettings):
    """Root configuration for stickerbot."""
    session: SessionConfig = Field(default_factory=SessionConfig)
    keywords: KeywordsConfig = Field(default_factory=KeywordsConfig)
    sticker: StickerConfig = Field(default_factory=StickerConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="STICKERBOT_", env_nested_delimiter="__")

    @property
    def auth_path(self) -> Path:
        """Get expanded auth directory path."""
        return Path(self.session.auth_dir).expanduser()
