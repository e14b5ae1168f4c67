"""Load configuration from YAML file and keyring."""

from pathlib import Path

import keyring
import yaml

SERVICE_NAME = "numbered-print"

DEFAULT_FOLDER = "src/"
DEFAULT_EXTENSIONS = ["png", "jpg", "jpeg", "gif", "webp", "bmp"]
DEFAULT_MAX_CONSECUTIVE_MISSES = 5
DEFAULT_MAX_INDEX = 9999
DEFAULT_OUTPUT_HTML = "numbered-print.html"

DEFAULT_PRINT_SETTINGS = {
    "landscape": False,
    "margin": "none",
    "print_background": True,
    "header": "",
    "footer": "",
}
DEFAULT_UI = {
    "show_image_info": True,
    "show_stats": True,
    "lazy_loading": True,
}
DEFAULT_THEME = {
    "primary_color": "#667eea",
    "secondary_color": "#764ba2",
}
MARGIN_CHOICES = {"none", "minimum", "default"}


def _find_project_root() -> Path:
    """Find project root by looking for pyproject.toml, walking up from cwd."""
    cwd = Path.cwd()
    current = cwd
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return cwd


def _config_paths(override: Path | None) -> list[Path]:
    """Return search order for config file."""
    if override is not None:
        return [override]
    project_root = _find_project_root()
    return [
        project_root / "conf" / "numbered-print.yaml",
        Path.home() / ".config" / "numbered-print" / "numbered-print.yaml",
    ]


def _get_password_from_keyring(account: str) -> str | None:
    """Fetch HTTP password from keyring. Returns None if not set."""
    value = keyring.get_password(SERVICE_NAME, account)
    return value if value else None


def _normalize_extensions(raw) -> list[str]:
    """Validate the extension list. Strips leading dots and drops duplicates."""
    if not isinstance(raw, list) or not raw:
        raise ValueError("image_extensions must be a non-empty list of strings.")
    extensions: list[str] = []
    for item in raw:
        if not isinstance(item, str) or not item.strip().lstrip("."):
            raise ValueError(
                f"image_extensions entries must be non-empty strings. Got {item!r}."
            )
        ext = item.strip().lstrip(".")
        if ext not in extensions:
            extensions.append(ext)
    return extensions


def _positive_int(data: dict, key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{key} must be a positive integer. Got {value!r}.")
    return value


def _non_negative_number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"{key} must be a number >= 0. Got {value!r}.")
    return float(value)


def _positive_number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{key} must be a number > 0. Got {value!r}.")
    return float(value)


def _merge_section(data: dict, key: str, defaults: dict) -> dict:
    """Overlay a YAML mapping on its defaults, keeping only known keys."""
    raw = data.get(key)
    if raw is None:
        return dict(defaults)
    if not isinstance(raw, dict):
        raise ValueError(f"{key} must be a mapping. Got {type(raw).__name__}.")
    merged = dict(defaults)
    for name, default in defaults.items():
        if name not in raw:
            continue
        value = raw[name]
        if isinstance(default, bool):
            if not isinstance(value, bool):
                raise ValueError(f"{key}.{name} must be true or false. Got {value!r}.")
        else:
            value = "" if value is None else str(value)
        merged[name] = value
    return merged


def _build_config(data: dict) -> dict:
    """Validate raw YAML data and fill in defaults. Raises ValueError if invalid."""
    image_folder = data.get("image_folder", DEFAULT_FOLDER)
    if not isinstance(image_folder, str) or not image_folder.strip():
        raise ValueError("image_folder must be a non-empty string.")

    print_settings = _merge_section(data, "print_settings", DEFAULT_PRINT_SETTINGS)
    if print_settings["margin"] not in MARGIN_CHOICES:
        raise ValueError(
            f"print_settings.margin must be one of {', '.join(sorted(MARGIN_CHOICES))}. "
            f"Got {print_settings['margin']!r}."
        )

    auth_username = data.get("auth_username")
    if auth_username is not None:
        auth_username = str(auth_username).strip() or None

    return {
        "image_folder": image_folder.strip(),
        "image_extensions": _normalize_extensions(
            data.get("image_extensions", DEFAULT_EXTENSIONS)
        ),
        "max_consecutive_misses": _positive_int(
            data, "max_consecutive_misses", DEFAULT_MAX_CONSECUTIVE_MISSES
        ),
        "max_index": _positive_int(data, "max_index", DEFAULT_MAX_INDEX),
        "probe_delay": _non_negative_number(data, "probe_delay", 0.0),
        "request_timeout": _positive_number(data, "request_timeout", 10.0),
        "auth_username": auth_username,
        "auth_password": None,
        "output_html": str(data.get("output_html") or DEFAULT_OUTPUT_HTML),
        "print_settings": print_settings,
        "ui": _merge_section(data, "ui", DEFAULT_UI),
        "theme": _merge_section(data, "theme", DEFAULT_THEME),
        "_loaded_from": "defaults",
    }


def default_config() -> dict:
    """Config used when no file is found."""
    return _build_config({})


def load_config(config_path: Path | None = None) -> dict:
    """Load config from YAML and keyring. Raises FileNotFoundError or ValueError if invalid.

    Args:
        config_path: Optional path to config file. If None, searches default
            locations and falls back to built-in defaults when none exists.
    """
    for path in _config_paths(config_path):
        if path.exists():
            with path.open() as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
            if not isinstance(data, dict):
                raise ValueError(
                    f"Invalid config ({path}): file must contain a YAML mapping."
                )
            config = _build_config(data)
            config["_loaded_from"] = str(path)
            break
    else:
        if config_path is not None:
            raise FileNotFoundError(
                f"Config not found: {config_path}\n"
                f"With content, for example:\n"
                '  image_folder: "src/"\n'
                "  image_extensions: [png, jpg, jpeg]\n"
                "  max_consecutive_misses: 5"
            )
        config = default_config()

    username = config["auth_username"]
    if username:
        password = _get_password_from_keyring(username)
        if not password:
            raise ValueError(
                f"Password for '{username}' not found in keyring. Run:\n"
                f"  numbered-print setup\n"
                f"Or store manually:\n"
                f"  keyring set {SERVICE_NAME} {username}"
            )
        config["auth_password"] = password
    return config
