"""
Taunting commentary for an injection, fetched from a chat-completions API.

The client never raises: every failure path maps to a fixed fallback line.
"""

import time
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import requests

from bugduck.logging_config import logger
from .config import FALLBACK_MESSAGES, KEYLESS_HOSTS, LLM_CONFIG, PROMPT_TEMPLATES


class DuckRoaster:
    """
    Client for an OpenAI-compatible chat-completions endpoint.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the client.

        Args:
            config: Optional configuration overrides (merges with LLM_CONFIG)
        """
        self.config = {**LLM_CONFIG, **{k: v for k, v in (config or {}).items() if v is not None}}

    def _is_keyless_endpoint(self) -> bool:
        host = urlparse(self.config["endpoint"]).hostname or ""
        return host in KEYLESS_HOSTS

    def build_payload(self, bugs: Sequence[Any]) -> Dict[str, Any]:
        prompt = PROMPT_TEMPLATES["roast"].format(bugs=", ".join(str(b) for b in bugs))
        return {
            "model": self.config["model"],
            "messages": [{"role": "system", "content": prompt}],
            "temperature": self.config["temperature"],
            "max_tokens": self.config["max_tokens"],
        }

    def roast(self, bugs: Sequence[Any]) -> str:
        """
        Ask the backend for a one-line taunt about ``bugs``.

        Returns:
            The generated line, or a fixed fallback on any failure
        """
        api_key = self.config.get("api_key")
        if not api_key and not self._is_keyless_endpoint():
            logger.debug("No commentary API key configured, using fallback")
            return FALLBACK_MESSAGES["no_key"]

        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        try:
            logger.debug(f"Requesting commentary from {self.config['endpoint']} ({self.config['model']})")
            start_time = time.time()

            response = requests.post(
                self.config["endpoint"],
                json=self.build_payload(bugs),
                headers=headers,
                timeout=self.config["timeout"],
            )

            elapsed = time.time() - start_time

            if not response.ok:
                logger.warning(f"Commentary backend error: {response.status_code}")
                return FALLBACK_MESSAGES["bad_status"]

            text = self._extract_content(response.json())
            logger.info(f"Commentary generated in {elapsed:.2f}s")
            return text or FALLBACK_MESSAGES["empty"]

        except requests.exceptions.Timeout:
            logger.error("Commentary request timed out")
            return FALLBACK_MESSAGES["error"]
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Commentary request failed: {e}")
            return FALLBACK_MESSAGES["error"]

    @staticmethod
    def _extract_content(data: Any) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        choices: List[Any] = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content.strip() if isinstance(content, str) and content.strip() else None


def get_duck_roast(bugs: Sequence[Any], config: Optional[Dict[str, Any]] = None) -> str:
    """
    Convenience function: one taunt for the applied bug kinds.

    Args:
        bugs: Applied BugKinds, in application order
        config: Optional overrides; defaults come from the user config
    """
    if config is None:
        from bugduck.user_config import get_user_config
        user_config = get_user_config()
        config = {
            "endpoint": user_config.get("commentary.endpoint"),
            "api_key": user_config.commentary_api_key,
            "model": user_config.get("commentary.model"),
            "timeout": user_config.get("commentary.timeout"),
        }
    return DuckRoaster(config).roast(bugs)
