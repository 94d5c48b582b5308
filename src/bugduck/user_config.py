"""
bugduck User Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.bugduck/config.json (cross-project settings)
- Local: .bugduck/config.json (project-specific overrides)

Config structure:
{
  "mutation": {
    "bugs_per_run": 3,          // Manual runs, clamped to [1, 10]
    "bugs_per_save": [1, 2, 3], // On-save runs sample uniformly from this
    "weights": {}               // Per-kind sampling weight overrides
  },
  "commentary": {
    "enabled": true,
    "endpoint": "https://api.openai.com/v1/chat/completions",
    "api_key": null,            // BUGDUCK_LLM_API_KEY wins when set
    "model": "gpt-4o-mini",
    "timeout": 10
  },
  "history": {"enabled": true},
  "backup": {"enabled": true}
}
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from bugduck.exceptions import ConfigError
from bugduck.logging_config import logger
from bugduck.paths import BugDuckPaths


MIN_BUGS_PER_RUN = 1
MAX_BUGS_PER_RUN = 10

DEFAULT_CONFIG = {
    "mutation": {
        "bugs_per_run": 3,
        "bugs_per_save": [1, 2, 3],
        "weights": {},
    },
    "commentary": {
        "enabled": True,
        "endpoint": "https://api.openai.com/v1/chat/completions",
        "api_key": None,
        "model": "gpt-4o-mini",
        "timeout": 10,
    },
    "history": {
        "enabled": True,
    },
    "backup": {
        "enabled": True,
    },
}


def clamp_bug_count(value: Any, default: int = 3) -> int:
    """
    Coerce a configured bug count into the supported [1, 10] range.

    Non-numeric values fall back to ``default`` before clamping.
    """
    try:
        n = int(value)
    except (TypeError, ValueError):
        n = default
    return max(MIN_BUGS_PER_RUN, min(MAX_BUGS_PER_RUN, n))


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.bugduck/config.json)
    3. Local config (.bugduck/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None, global_config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            project_root: Project root directory (defaults to CWD)
            global_config_path: Override for the global config file
        """
        self.project_root = project_root or Path.cwd()
        paths = BugDuckPaths(self.project_root)
        self.global_config_path = global_config_path or paths.global_config
        self.local_config_path = paths.local_config

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        config = self._deep_merge({}, DEFAULT_CONFIG)

        for label, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    config = self._deep_merge(config, json.load(f))
                logger.debug(f"Loaded {label} config from {path}")
            except Exception as e:
                logger.warning(f"Failed to load {label} config: {e}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """
        Deep merge two dictionaries, with override taking precedence.
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            elif isinstance(value, dict):
                result[key] = self._deep_merge({}, value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Examples:
            config.get("mutation.bugs_per_run")  # 3
            config.get("commentary.model")       # "gpt-4o-mini"
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    @property
    def bugs_per_run(self) -> int:
        return clamp_bug_count(self.get("mutation.bugs_per_run", 3))

    @property
    def bugs_per_save_choices(self) -> List[int]:
        """Candidate counts for the on-save path; invalid entries are dropped."""
        raw = self.get("mutation.bugs_per_save", [1, 2, 3])
        if isinstance(raw, int):
            raw = [raw]
        choices = sorted({clamp_bug_count(c) for c in raw if isinstance(c, int)}) if isinstance(raw, list) else []
        return choices or [1, 2, 3]

    @property
    def commentary_api_key(self) -> Optional[str]:
        return os.getenv("BUGDUCK_LLM_API_KEY") or self.get("commentary.api_key")

    def set_global(self, key: str, value: Any) -> bool:
        return self._set_and_save(key, value, is_global=True)

    def set_local(self, key: str, value: Any) -> bool:
        return self._set_and_save(key, value, is_global=False)

    def _set_and_save(self, key: str, value: Any, is_global: bool) -> bool:
        """
        Set a config value and save to appropriate file.

        Returns:
            True if successful, False otherwise

        Raises:
            ConfigError: If the key is malformed or names an unknown section.
        """
        keys = key.split(".")
        if not all(keys):
            raise ConfigError(f"Malformed config key '{key}'")
        if keys[0] not in DEFAULT_CONFIG:
            raise ConfigError(
                f"Unknown config section '{keys[0]}'. Known: {', '.join(DEFAULT_CONFIG)}"
            )

        config_path = self.global_config_path if is_global else self.local_config_path

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = json.load(f)
            except Exception as e:
                logger.error(f"Failed to load config from {config_path}: {e}")
                return False
        else:
            config = {}

        current = config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(config, f, indent=2)

            self._config = self._load_config()

            logger.info(f"Saved {'global' if is_global else 'local'} config: {key}={value}")
            return True
        except Exception as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False

    def get_all(self) -> Dict[str, Any]:
        return self._deep_merge({}, self._config)

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._config = self._load_config()


# Global singleton
_config: Optional[UserConfig] = None


def get_user_config(project_root: Optional[Path] = None) -> UserConfig:
    """
    Get the user configuration singleton.

    Args:
        project_root: Optional project root override

    Returns:
        UserConfig instance
    """
    global _config
    if project_root is not None:
        return UserConfig(project_root)
    if _config is None:
        _config = UserConfig()
    return _config


def reset_user_config() -> None:
    """Reset the global config singleton (for testing)."""
    global _config
    _config = None
