#!/usr/bin/env python3
# anywhere/config/config.py
from __future__ import annotations

"""
Configuration loader (stdlib-only).

Precedence (low → high):
  1) Built-in defaults
  2) Files in the config dir: .env, config.json, config.toml
  3) Environment variables prefixed with ANYWHERE_ (prefix stripped)

The config dir is $ANYWHERE_CONFIG_DIR, else /etc/agents-anywhere.

Validation:
  - USER: non-empty account name
  - *_PATH / *_DIR / *_FILE keys: normalized paths (no creation here)
  - PERSIST_DIRS: plain names, no separators or '..'
  - SSH_PORT: 1..65535
  - MIN_PASSWORD_LENGTH / MAX_AUTH_TRIES / CLIENT_ALIVE_*: int >= 1
  - USE_SUDO: bool
  - FAIL2BAN_BACKEND: one of {'auto','polling','pyinotify'}
  - LOG_LEVEL: one of {'DEBUG','INFO','WARNING','ERROR','CRITICAL'}
"""

from dataclasses import dataclass
from typing import Any, Mapping
from pathlib import Path
import getpass
import json
import logging
import os
import re
import tomllib

from anywhere.errors import ConfigError

log = logging.getLogger(__name__)

ENV_PREFIX = "ANYWHERE_"
DEFAULT_CONFIG_DIR = "/etc/agents-anywhere"

# ---------- defaults ----------


def _default_user() -> str:
    return os.environ.get("USER") or getpass.getuser()


DEFAULTS: dict[str, Any] = {
    "PRODUCT_NAME": "Agents Anywhere",
    "USER": None,                        # resolved at load time
    "HOME": None,                        # resolved at load time
    # persistent storage
    "MOUNT_PATH": "/data",
    "PERSIST_DIRS": [".claude", ".config", ".local", ".npm", ".cache"],
    # skills
    "SKILLS_SOURCE": "/opt/default-skills",
    "SKILLS_DEST": ".claude/skills",     # relative to MOUNT_PATH
    # host identity
    "HOST_KEY_DIR": "/etc/ssh",
    "HOST_KEY_STORE": ".ssh_host_keys",  # relative to MOUNT_PATH
    "HOST_KEY_TYPES": ["rsa", "ecdsa", "ed25519"],
    # authentication
    "PUBLIC_KEY_PREFIX": "SSH_PUBLIC_KEY",
    "PASSWORD_VAR": "SSH_PASSWORD",
    "MIN_PASSWORD_LENGTH": 16,
    "AUTHORIZED_KEYS": "~/.ssh/authorized_keys",
    # secrets
    "SECRET_VARS": ["ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GH_TOKEN", "RAILWAY_TOKEN"],
    "SECRETS_FILE": "~/.env_secrets",
    # shell
    "BASHRC": "~/.bashrc",
    "SHELL_RC": "~/.bashrc_agents",
    "TMUX_SESSION": "main",
    "AGENTS": ["claude", "codex"],
    "MOTD_PATH": "/etc/motd",
    # daemon
    "SSHD_BINARY": "/usr/sbin/sshd",
    "SSHD_CONFIG_DIR": "/etc/ssh/sshd_config.d",
    "SSH_PORT": 22,
    "MAX_AUTH_TRIES": 3,
    "CLIENT_ALIVE_INTERVAL": 60,
    "CLIENT_ALIVE_COUNT_MAX": 3,
    "FAIL2BAN_JAIL": "/etc/fail2ban/jail.d/agents-anywhere.local",
    "FAIL2BAN_MAXRETRY": 5,
    "FAIL2BAN_FINDTIME": 600,
    "FAIL2BAN_BANTIME": 3600,
    "FAIL2BAN_BACKEND": "polling",
    "SSHD_LOG_FILE": "/var/log/sshd.log",
    # runtime
    "USE_SUDO": True,
    "LOG_LEVEL": "INFO",
    "LOG_FILE_PATH": None,
}

# ---------- data model ----------


@dataclass(frozen=True)
class AppConfig:
    product_name: str
    user: str
    home: Path

    mount_path: Path
    persist_dirs: tuple[str, ...]

    skills_source: Path
    skills_dest: Path

    host_key_dir: Path
    host_key_store: Path
    host_key_types: tuple[str, ...]

    public_key_prefix: str
    password_var: str
    min_password_length: int
    authorized_keys: Path

    secret_vars: tuple[str, ...]
    secrets_file: Path

    bashrc: Path
    shell_rc: Path
    tmux_session: str
    agents: tuple[str, ...]
    motd_path: Path

    sshd_binary: Path
    sshd_config_dir: Path
    ssh_port: int
    max_auth_tries: int
    client_alive_interval: int
    client_alive_count_max: int
    fail2ban_jail: Path
    fail2ban_maxretry: int
    fail2ban_findtime: int
    fail2ban_bantime: int
    fail2ban_backend: str
    sshd_log_file: Path

    use_sudo: bool
    log_level: str
    log_file_path: Path | None

    @property
    def ssh_dir(self) -> Path:
        return self.authorized_keys.parent


# ---------- file loaders (stdlib) ----------

def _load_env_file(path: Path) -> dict[str, str]:
    """Very small .env parser: KEY=VALUE, supports quotes; ignores comments/blank lines."""
    out: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return out

    line_re = re.compile(r"""^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$""")
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = line_re.match(line)
        if not m:
            continue
        k, v = m.group(1), m.group(2)
        if (v.startswith("'") and v.endswith("'")) or (v.startswith('"') and v.endswith('"')):
            v = v[1:-1]
        out[k] = v
    return out


def _load_json_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed JSON in {path}: {exc}") from exc


def _load_toml_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Malformed TOML in {path}: {exc}") from exc


def _flatten_mapping(obj: Any, prefix: str = "") -> dict[str, Any]:
    """
    Flatten nested dicts to UPPER_SNAKE keys.
    Example: {'fail2ban': {'bantime': 60}} -> {'FAIL2BAN_BANTIME': 60}
    Lists are kept as values.
    """
    flat: dict[str, Any] = {}
    if isinstance(obj, Mapping):
        for k, v in obj.items():
            key = f"{prefix}_{k}" if prefix else str(k)
            if isinstance(v, Mapping):
                flat.update(_flatten_mapping(v, key))
            else:
                flat[str(key).upper()] = v
    return flat


def _config_dir(environ: Mapping[str, str]) -> Path:
    return Path(environ.get(f"{ENV_PREFIX}CONFIG_DIR") or DEFAULT_CONFIG_DIR)


def _find_config_files(config_dir: Path) -> list[Path]:
    return [
        config_dir / ".env",
        config_dir / "config.json",
        config_dir / "config.toml",
    ]


# ---------- normalization & coercion ----------

_BOOL_TRUE = {"1", "true", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "no", "n", "off"}


def _as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    s = str(val).strip().lower()
    if s in _BOOL_TRUE:
        return True
    if s in _BOOL_FALSE:
        return False
    raise ConfigError(f"Expected boolean, got: {val!r}")


def _as_int(val: Any, *, minimum: int | None = None, maximum: int | None = None) -> int:
    if isinstance(val, int) and not isinstance(val, bool):
        out = val
    else:
        try:
            out = int(str(val).strip())
        except ValueError as exc:
            raise ConfigError(f"Expected integer, got: {val!r}") from exc
    if minimum is not None and out < minimum:
        raise ConfigError(f"Expected integer >= {minimum}, got: {out}")
    if maximum is not None and out > maximum:
        raise ConfigError(f"Expected integer <= {maximum}, got: {out}")
    return out


def _as_opt_str(val: Any) -> str | None:
    return None if val is None or str(val).strip().lower() in {"", "none"} else str(val)


def _as_list(val: Any) -> tuple[str, ...]:
    """Accept a TOML/JSON list or a comma/whitespace separated string."""
    if val is None:
        return ()
    if isinstance(val, (list, tuple)):
        items = [str(v).strip() for v in val]
    else:
        items = [s.strip() for s in re.split(r"[,\s]+", str(val))]
    return tuple(s for s in items if s)


def _as_log_level(val: Any) -> str:
    lv = _as_opt_str(val) or "INFO"
    up = lv.upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if up not in allowed:
        raise ConfigError(
            f"LOG_LEVEL must be one of {sorted(allowed)}, got {lv!r}")
    return up


def _as_backend(val: Any) -> str:
    backend = str(val).strip().lower()
    # systemd is absent in the container; sshd logs to a file there
    allowed = {"auto", "polling", "pyinotify"}
    if backend not in allowed:
        raise ConfigError(
            f"FAIL2BAN_BACKEND must be one of {sorted(allowed)}, got {val!r}")
    return backend


def _expand(val: Any, home: Path) -> Path:
    s = os.path.expandvars(str(val))
    if s == "~" or s.startswith("~/"):
        s = str(home) + s[1:]
    return Path(s)


def _as_path(val: Any, home: Path) -> Path:
    p = _expand(val, home)
    if not p.is_absolute():
        raise ConfigError(f"Expected an absolute path, got: {val!r}")
    return p


def _as_opt_path(val: Any, home: Path) -> Path | None:
    v = _as_opt_str(val)
    return None if v is None else _as_path(v, home)


def _resolve_under(base: Path, val: Any, home: Path) -> Path:
    """Resolve a config path relative to `base` (the mount) when not absolute."""
    p = _expand(val, home)
    return p if p.is_absolute() else base / p


def _as_dir_names(val: Any) -> tuple[str, ...]:
    names = _as_list(val)
    for name in names:
        if "/" in name or name in {".", ".."}:
            raise ConfigError(
                f"PERSIST_DIRS entries must be plain directory names, got {name!r}")
    return names


# ---------- merge & load ----------

def _normalize_keys(d: Mapping[str, Any]) -> dict[str, Any]:
    return {str(k).upper(): v for k, v in d.items()}


def _merge_sources(environ: Mapping[str, str]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(DEFAULTS)

    for file in _find_config_files(_config_dir(environ)):
        if file.name == ".env":
            merged.update(_normalize_keys(_load_env_file(file)))
        elif file.suffix == ".json":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_json_file(file))))
        elif file.suffix == ".toml":
            merged.update(_normalize_keys(
                _flatten_mapping(_load_toml_file(file))))

    # Environment variables override all; only take ANYWHERE_ prefixed keys
    env_overrides = {
        k[len(ENV_PREFIX):]: v
        for k, v in environ.items()
        if k.startswith(ENV_PREFIX) and k != f"{ENV_PREFIX}CONFIG_DIR"
    }
    merged.update(_normalize_keys(env_overrides))
    return merged


# ---------- validation ----------

def _validate_and_build(config: dict[str, Any]) -> AppConfig:
    user = _as_opt_str(config.get("USER")) or _default_user()
    home_raw = _as_opt_str(config.get("HOME"))
    home = Path(os.path.expanduser(home_raw)) if home_raw else Path.home()
    if not home.is_absolute():
        raise ConfigError(f"HOME must be absolute, got {home_raw!r}")

    mount = _as_path(config["MOUNT_PATH"], home)

    ssh_port = _as_int(config["SSH_PORT"], minimum=1, maximum=65535)
    tmux_session = str(config["TMUX_SESSION"])
    # Interpolated into shell scripts
    if not re.fullmatch(r"[A-Za-z0-9_-]+", tmux_session):
        raise ConfigError(
            f"TMUX_SESSION must be alphanumeric/underscore/dash only: {tmux_session!r}")
    if not re.fullmatch(r"[A-Za-z0-9_][A-Za-z0-9_.-]*\$?", user):
        raise ConfigError(f"USER is not a valid account name: {user!r}")

    unknown = sorted(k for k in config if k not in DEFAULTS)
    if unknown:
        log.warning("Ignoring unknown configuration key(s): %s", ", ".join(unknown))

    return AppConfig(
        product_name=str(config["PRODUCT_NAME"]),
        user=user,
        home=home,
        mount_path=mount,
        persist_dirs=_as_dir_names(config["PERSIST_DIRS"]),
        skills_source=_as_path(config["SKILLS_SOURCE"], home),
        skills_dest=_resolve_under(mount, config["SKILLS_DEST"], home),
        host_key_dir=_as_path(config["HOST_KEY_DIR"], home),
        host_key_store=_resolve_under(mount, config["HOST_KEY_STORE"], home),
        host_key_types=_as_list(config["HOST_KEY_TYPES"]),
        public_key_prefix=str(config["PUBLIC_KEY_PREFIX"]),
        password_var=str(config["PASSWORD_VAR"]),
        min_password_length=_as_int(config["MIN_PASSWORD_LENGTH"], minimum=1),
        authorized_keys=_as_path(config["AUTHORIZED_KEYS"], home),
        secret_vars=_as_list(config["SECRET_VARS"]),
        secrets_file=_as_path(config["SECRETS_FILE"], home),
        bashrc=_as_path(config["BASHRC"], home),
        shell_rc=_as_path(config["SHELL_RC"], home),
        tmux_session=tmux_session,
        agents=_as_list(config["AGENTS"]),
        motd_path=_as_path(config["MOTD_PATH"], home),
        sshd_binary=_as_path(config["SSHD_BINARY"], home),
        sshd_config_dir=_as_path(config["SSHD_CONFIG_DIR"], home),
        ssh_port=ssh_port,
        max_auth_tries=_as_int(config["MAX_AUTH_TRIES"], minimum=1),
        client_alive_interval=_as_int(config["CLIENT_ALIVE_INTERVAL"], minimum=1),
        client_alive_count_max=_as_int(config["CLIENT_ALIVE_COUNT_MAX"], minimum=1),
        fail2ban_jail=_as_path(config["FAIL2BAN_JAIL"], home),
        fail2ban_maxretry=_as_int(config["FAIL2BAN_MAXRETRY"], minimum=1),
        fail2ban_findtime=_as_int(config["FAIL2BAN_FINDTIME"], minimum=1),
        fail2ban_bantime=_as_int(config["FAIL2BAN_BANTIME"], minimum=1),
        fail2ban_backend=_as_backend(config["FAIL2BAN_BACKEND"]),
        sshd_log_file=_as_path(config["SSHD_LOG_FILE"], home),
        use_sudo=_as_bool(config["USE_SUDO"]),
        log_level=_as_log_level(config["LOG_LEVEL"]),
        log_file_path=_as_opt_path(config["LOG_FILE_PATH"], home),
    )


# ---------- public API ----------

def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    Load, merge, normalize, and validate configuration.
    No filesystem side-effects (no directory creation).
    """
    env = os.environ if environ is None else environ
    return _validate_and_build(_merge_sources(env))
