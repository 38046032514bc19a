"""Configuration resolution.

Merges a partial user configuration over ``DEFAULT_MEMORY_CONFIG`` and
validates the result. The merge is deliberately uneven:

* Scalar settings (provider names, API keys, model names, flags) take the
  user value when it is truthy and fall back to the default otherwise.
* ``vector_store.config`` and ``llm.config`` resolve their known keys as
  scalars, then apply every user key on top. Unknown keys pass through, and
  an explicit user value overwrites the resolved one even if falsy.
* The ``config`` bag nested inside those two maps is replaced wholesale by
  the user's bag (or ``{}``). It is never merged key by key.
* ``history_store`` and ``graph_store`` are merged one level deep:
  ``{**default, **user}``.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

import pydantic
import yaml
from pydantic.alias_generators import to_snake

from ..errors import ValidationError
from .defaults import API_KEY_ENV_VARS, DEFAULT_MEMORY_CONFIG
from .schema import MemoryConfig

logger = logging.getLogger(__name__)

_SECTIONS = ("embedder", "vector_store", "llm", "history_store", "graph_store")


def _thaw(value: Any) -> Any:
    """Deep-copy mappings into plain dicts."""
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_thaw(v) for v in value]
    return value


def _snake_keys(data: Optional[Mapping]) -> dict:
    if not data:
        return {}
    return {to_snake(k): v for k, v in data.items()}


def _normalize(user_config: Mapping) -> dict:
    """Convert camelCase keys to snake_case at the structural levels.

    The opaque nested ``config`` bags are left untouched.
    """
    normalized = _snake_keys(user_config)
    for section in _SECTIONS:
        raw = normalized.get(section)
        if not raw:
            continue
        section_data = _snake_keys(raw)
        inner = section_data.get("config")
        if isinstance(inner, Mapping):
            section_data["config"] = _snake_keys(inner)
        if isinstance(section_data.get("llm"), Mapping):
            section_data["llm"] = _snake_keys(section_data["llm"])
        normalized[section] = section_data
    return normalized


def _env_api_key() -> Optional[str]:
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


def _pick(user_value: Any, default_value: Any) -> Any:
    return user_value if user_value else default_value


class ConfigManager:
    """Builds validated ``MemoryConfig`` objects from partial input."""

    @classmethod
    def merge_config(
        cls,
        user_config: Union[Mapping, MemoryConfig, None] = None,
    ) -> MemoryConfig:
        """Merge a partial config over the defaults and validate it.

        Args:
            user_config: Partial configuration. snake_case and camelCase keys
                are both accepted. An already-resolved ``MemoryConfig`` is
                re-resolved to an equal value.

        Raises:
            ValidationError: If any required field is missing or malformed
                after the merge.
        """
        if isinstance(user_config, MemoryConfig):
            user_config = user_config.model_dump()
        user = _normalize(user_config or {})
        defaults = DEFAULT_MEMORY_CONFIG
        env_key = _env_api_key()

        user_embedder = user.get("embedder") or {}
        user_embedder_cfg = user_embedder.get("config") or {}
        default_embedder = defaults["embedder"]
        default_embedder_cfg = default_embedder["config"]

        user_vs = user.get("vector_store") or {}
        user_vs_cfg = user_vs.get("config") or {}
        default_vs = defaults["vector_store"]
        default_vs_cfg = default_vs["config"]

        user_llm = user.get("llm") or {}
        user_llm_cfg = user_llm.get("config") or {}
        default_llm = defaults["llm"]
        default_llm_cfg = default_llm["config"]

        merged = {
            "version": _pick(user.get("version"), defaults["version"]),
            "embedder": {
                "provider": _pick(user_embedder.get("provider"), default_embedder["provider"]),
                "config": {
                    "api_key": _pick(
                        user_embedder_cfg.get("api_key"),
                        default_embedder_cfg["api_key"] or env_key,
                    ),
                    "model": _pick(user_embedder_cfg.get("model"), default_embedder_cfg["model"]),
                    "account_id": _pick(
                        user_embedder_cfg.get("account_id"), default_embedder_cfg["account_id"]
                    ),
                    "url": _pick(user_embedder_cfg.get("url"), default_embedder_cfg["url"]),
                },
            },
            "vector_store": {
                "provider": _pick(user_vs.get("provider"), default_vs["provider"]),
                "config": {
                    "collection_name": _pick(
                        user_vs_cfg.get("collection_name"), default_vs_cfg["collection_name"]
                    ),
                    "dimension": _pick(user_vs_cfg.get("dimension"), default_vs_cfg["dimension"]),
                    **user_vs_cfg,
                    "config": _thaw(user_vs_cfg.get("config") or {}),
                },
            },
            "llm": {
                "provider": _pick(user_llm.get("provider"), default_llm["provider"]),
                "config": {
                    "api_key": _pick(
                        user_llm_cfg.get("api_key"),
                        default_llm_cfg["api_key"] or env_key,
                    ),
                    "model": _pick(user_llm_cfg.get("model"), default_llm_cfg["model"]),
                    "base_url": _pick(user_llm_cfg.get("base_url"), default_llm_cfg["base_url"]),
                    **user_llm_cfg,
                    "config": _thaw(user_llm_cfg.get("config") or {}),
                },
            },
            "agent_history_name": _pick(
                user.get("agent_history_name"), defaults["agent_history_name"]
            ),
            "custom_prompt": user.get("custom_prompt"),
            "graph_store": {
                **_thaw(defaults["graph_store"]),
                **_thaw(user.get("graph_store") or {}),
            },
            "history_store": {
                **_thaw(defaults["history_store"]),
                **_thaw(user.get("history_store") or {}),
            },
            "disable_history": _pick(user.get("disable_history"), defaults["disable_history"]),
            "enable_graph": _pick(user.get("enable_graph"), defaults["enable_graph"]),
        }

        return cls.validate(merged)

    @staticmethod
    def validate(data: Mapping) -> MemoryConfig:
        """Validate a fully merged mapping against the schema.

        Raises:
            ValidationError: Naming each offending dotted path.
        """
        try:
            return MemoryConfig.model_validate(data)
        except pydantic.ValidationError as e:
            errors = [
                (".".join(str(part) for part in err["loc"]), err["msg"])
                for err in e.errors()
            ]
            logger.error(f"Configuration rejected: {errors}")
            raise ValidationError(errors) from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> MemoryConfig:
        """Load a partial configuration from YAML and resolve it.

        A missing file resolves to the defaults.
        """
        path = Path(path).expanduser()
        if not path.exists():
            logger.info(f"No config file at {path}, using defaults")
            return cls.merge_config({})

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, Mapping):
            raise ValidationError([("<root>", f"expected a mapping in {path}")])
        return cls.merge_config(data)

    @classmethod
    def from_env(cls, prefix: str = "AGENT_MEMORY") -> MemoryConfig:
        """Resolve the YAML file named by ``{prefix}_CONFIG``."""
        config_path = os.environ.get(
            f"{prefix}_CONFIG",
            "~/.agent-memory/config.yaml",
        )
        return cls.from_file(config_path)
