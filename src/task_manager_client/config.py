"""Client configuration.

Settings live in ``.taskman/config.toml`` under a ``[client]`` table. The
file is discovered by walking up from the working directory; without one the
defaults apply and the session database lives in ``~/.taskman/``.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from .client.gateway import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

_CONFIG_DIR = ".taskman"
_CONFIG_FILE = "config.toml"
_DEFAULT_SESSION_DB = "session.db"

_GITIGNORE_CONTENT = """\
session.db
*.db-journal
"""


@dataclass(frozen=True)
class ClientConfig:
    """Task manager client configuration.

    Attributes:
        base_url: Base URL of the backend API.
        timeout_seconds: Request timeout; None keeps the httpx default.
        session_db: Session database file, relative to the config directory.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float | None = None
    session_db: str = _DEFAULT_SESSION_DB

    def resolve_session_db(self, config_dir: Path) -> Path:
        """Absolute path of the session database."""
        path = Path(self.session_db).expanduser()
        if path.is_absolute():
            return path
        return config_dir.resolve() / path


def default_config_dir() -> Path:
    return Path.home() / _CONFIG_DIR


def load_client_config(config_file: Path) -> ClientConfig:
    """Load config from a TOML file.

    Raises:
        FileNotFoundError: If ``config_file`` is missing.
        ValueError: On invalid TOML or invalid values.
    """
    if not config_file.exists():
        msg = f"Client config not found: {config_file}"
        raise FileNotFoundError(msg)

    content = config_file.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {config_file}: {exc}"
        raise ValueError(msg) from exc

    return _parse_config(data)


def _parse_config(data: dict[str, object]) -> ClientConfig:
    """Parse raw TOML data. Unknown fields are ignored."""
    client = data.get("client", {})
    if not isinstance(client, dict):
        msg = "[client] section must be a table"
        raise ValueError(msg)

    timeout = client.get("timeout_seconds")
    if timeout is not None and not isinstance(timeout, (int, float)):
        msg = "client.timeout_seconds must be a number"
        raise ValueError(msg)

    config = ClientConfig(
        base_url=str(client.get("base_url", DEFAULT_BASE_URL)),
        timeout_seconds=float(timeout) if timeout is not None else None,
        session_db=str(client.get("session_db", _DEFAULT_SESSION_DB)),
    )
    _validate_config(config)
    return config


def _validate_config(config: ClientConfig) -> None:
    if not config.base_url.startswith(("http://", "https://")):
        msg = f"client.base_url must be an http(s) URL, got '{config.base_url}'"
        raise ValueError(msg)
    if config.timeout_seconds is not None and config.timeout_seconds <= 0:
        msg = f"client.timeout_seconds must be positive, got {config.timeout_seconds}"
        raise ValueError(msg)
    if not config.session_db.strip():
        msg = "client.session_db must not be empty"
        raise ValueError(msg)


def find_config_dir(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` to the nearest ``.taskman/config.toml``.

    Returns:
        The ``.taskman`` directory, or None if not found.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / _CONFIG_DIR
        if (candidate / _CONFIG_FILE).is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def create_default_config(
    project_path: Path,
    *,
    base_url: str = DEFAULT_BASE_URL,
    force: bool = False,
) -> ClientConfig:
    """Write ``.taskman/config.toml`` and ``.gitignore`` under ``project_path``.

    Raises:
        FileExistsError: If the config exists and force=False.
        ValueError: If ``base_url`` is invalid.
    """
    config_dir = project_path / _CONFIG_DIR
    config_file = config_dir / _CONFIG_FILE
    if config_file.exists() and not force:
        msg = f"Client already configured: {config_file}"
        raise FileExistsError(msg)

    config = ClientConfig(base_url=base_url)
    _validate_config(config)

    config_dir.mkdir(parents=True, exist_ok=True)
    config_file.write_text(_generate_toml(config), encoding="utf-8")
    (config_dir / ".gitignore").write_text(_GITIGNORE_CONTENT, encoding="utf-8")

    logger.info("Wrote client config to %s", config_file)
    return config


def resolve_config_for_cli(
    config_override: str | None = None,
    base_url_override: str | None = None,
) -> tuple[ClientConfig, Path]:
    """Resolve configuration and session database path for CLI commands.

    Args:
        config_override: Explicit --config file. Skips discovery.
        base_url_override: Explicit --base-url / TASKMAN_BASE_URL.

    Returns:
        (config, session_db_path).

    Raises:
        FileNotFoundError: If an explicit config file does not exist.
        ValueError: If the config file or the override is invalid.
    """
    if config_override is not None:
        config_file = Path(config_override)
        config = load_client_config(config_file)
        config_dir = config_file.resolve().parent
    else:
        found = find_config_dir()
        if found is None:
            config = ClientConfig()
            config_dir = default_config_dir()
        else:
            config = load_client_config(found / _CONFIG_FILE)
            config_dir = found

    if base_url_override:
        config = replace(config, base_url=base_url_override)
        _validate_config(config)

    return config, config.resolve_session_db(config_dir)


def _generate_toml(config: ClientConfig) -> str:
    lines = [
        "[client]",
        f'base_url = "{_escape_toml_string(config.base_url)}"',
        f'session_db = "{_escape_toml_string(config.session_db)}"',
    ]
    if config.timeout_seconds is not None:
        lines.append(f"timeout_seconds = {config.timeout_seconds}")
    lines.append("")
    return "\n".join(lines)


def _escape_toml_string(value: str) -> str:
    """Escape special characters for TOML string values."""
    return value.replace("\\", "\\\\").replace('"', '\\"')
