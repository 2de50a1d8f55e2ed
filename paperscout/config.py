from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from paperscout import arxiv, s2

DEFAULT_TIMEOUT = 20.0
DEFAULT_MAX_RESULTS = 10
DEFAULT_KEYWORDS = "LLM"


@dataclass(frozen=True)
class AppConfig:
    s2_api_key: str = ""
    arxiv_base_url: str = arxiv.ARXIV_BASE
    s2_base_url: str = s2.S2_BASE
    request_timeout: float = DEFAULT_TIMEOUT
    max_results: int = DEFAULT_MAX_RESULTS
    default_keywords: str = DEFAULT_KEYWORDS
    source_path: str = ""


def _to_str(value: Any) -> str:
    return str(value or "").strip()


def _to_float(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _to_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _pick_config_path() -> Path | None:
    configured = _to_str(os.getenv("PAPERSCOUT_CONFIG_FILE"))
    if configured:
        path = Path(configured)
        if not path.exists():
            raise RuntimeError(f"Config file not found: {path}")
        return path

    default_paths = [Path("config.local.json")]
    for path in default_paths:
        if path.exists():
            return path
    return None


def _load_json_object(path: Path) -> dict[str, Any]:
    try:
        loaded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as error:
        raise RuntimeError(f"Failed to read config file: {path}") from error
    if not isinstance(loaded, dict):
        raise RuntimeError(f"Config file must be a JSON object: {path}")
    return loaded


def _deep_merge_dict(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = dict(base)
    for key, override_value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            merged[key] = _deep_merge_dict(base_value, override_value)
        else:
            merged[key] = override_value
    return merged


def _clear_placeholder(value: Any) -> str:
    text = _to_str(value)
    if text in {"YOUR_S2_API_KEY"}:
        return ""
    return text


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name)
    return value if isinstance(value, dict) else {}


def load_app_config() -> AppConfig:
    config_path = _pick_config_path()
    default_path = Path("config.example.json")
    default_raw: dict[str, Any] = _load_json_object(default_path) if default_path.exists() else {}
    override_raw: dict[str, Any] = _load_json_object(config_path) if config_path is not None else {}
    raw: dict[str, Any] = _deep_merge_dict(default_raw, override_raw)

    providers_obj = _section(raw, "providers")
    http_obj = _section(raw, "http")
    search_obj = _section(raw, "search")

    source_parts: list[str] = []
    if default_path.exists():
        source_parts.append(str(default_path))
    if config_path is not None:
        source_parts.append(str(config_path))
    source_path = " + ".join(source_parts) if source_parts else "defaults"

    return AppConfig(
        s2_api_key=_clear_placeholder(providers_obj.get("s2_api_key") or raw.get("s2_api_key")),
        arxiv_base_url=_to_str(providers_obj.get("arxiv_base_url")) or arxiv.ARXIV_BASE,
        s2_base_url=_to_str(providers_obj.get("s2_base_url")) or s2.S2_BASE,
        request_timeout=_to_float(http_obj.get("timeout"), DEFAULT_TIMEOUT),
        max_results=_to_int(search_obj.get("max_results"), DEFAULT_MAX_RESULTS),
        default_keywords=_to_str(search_obj.get("default_keywords")) or DEFAULT_KEYWORDS,
        source_path=source_path,
    )
