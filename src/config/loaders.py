"""
YAML config loading for the METAR tools.

``config/metar.yaml`` is read with ``${VAR}`` / ``${VAR:-default}``
placeholders filled from the environment, then a sibling
``config/metar.local.yaml`` (operator overrides, not shipped) is layered
on top when it exists.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

logger = structlog.get_logger(__name__)

_PROJ_DIR = Path(__file__).resolve().parents[2]

# ${VAR} is left as-is when VAR is unset; ${VAR:-default} also covers an empty VAR.
_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")


def expand_placeholders(text: str) -> str:
    def _fill(match: "re.Match[str]") -> str:
        value = os.environ.get(match.group("name"))
        default = match.group("default")
        if default is None:
            return match.group(0) if value is None else value
        return value or default

    return _PLACEHOLDER.sub(_fill, text)


def resolve_config_path(path: str) -> str:
    """Relative paths resolve from the project root, not the working directory."""
    candidate = Path(path)
    return str(candidate if candidate.is_absolute() else _PROJ_DIR / candidate)


def read_config_file(path: str) -> Any:
    """Parse one YAML file after placeholder expansion; an empty file reads as ``{}``.

    Raises FileNotFoundError and yaml.YAMLError unchanged.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(expand_placeholders(f.read()))
    return {} if data is None else data


def overlay(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Layer *override* onto a copy of *base*.

    Sections merge key by key, a null value drops the key, anything else
    replaces it. Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = overlay(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str) -> Any:
    """Read the config at *path* plus its optional ``*.local.yaml`` sibling.

    The base file is required. A local file that cannot be parsed, or that
    is not a mapping, is logged and skipped.
    """
    path = resolve_config_path(path)
    data = read_config_file(path)

    base = Path(path)
    local_path = str(base.with_suffix(".local" + base.suffix))
    if not os.path.isfile(local_path):
        return data

    try:
        local = read_config_file(local_path)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable local config", local_path=local_path, error=str(exc))
        return data

    if not isinstance(local, dict) or not isinstance(data, dict):
        logger.warning("Ignoring local config; both files must be mappings", local_path=local_path)
        return data

    logger.debug("Applied local config", local_path=local_path, sections=sorted(local))
    return overlay(data, local)
