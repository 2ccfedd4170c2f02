import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from projectgen.core.errors import ConfigError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 5000
    debug: bool = False
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 4000
    openai_timeout: float = 60.0
    output_root: Path = Path("generated_projects")
    cors_origins: tuple = ("*",)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """
        Lê a configuração do ambiente (e do .env, se existir) uma única vez,
        no startup. O resultado é passado explicitamente para create_app.
        """
        if dotenv:
            load_dotenv()
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        timeout = _env_number("OPENAI_TIMEOUT", "60", float)
        if timeout <= 0:
            raise ConfigError("OPENAI_TIMEOUT must be greater than zero")
        return cls(
            host=os.getenv("FLASK_HOST", "127.0.0.1"),
            port=_env_number("FLASK_PORT", "5000", int),
            debug=_env_bool("DEBUG", "False"),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            openai_temperature=_env_number("OPENAI_TEMPERATURE", "0.7", float),
            openai_max_tokens=_env_number("OPENAI_MAX_TOKENS", "4000", int),
            openai_timeout=timeout,
            output_root=Path(os.getenv("GENERATED_PROJECTS_DIR", "generated_projects")),
            cors_origins=tuple(origins or ["*"]),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
