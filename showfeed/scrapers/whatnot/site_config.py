import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "whatnot_config.yaml"

DEFAULT_SELECTORS: Dict[str, Any] = {
    "show_link": 'a[href*="/live/"]',
    "card_time": 'time[datetime], [data-start-time]',
    "card_host": ['a[href*="/user/"]', '[data-test*="seller"]'],
    "detail_host": ['a[href*="/user/"]', '[data-test*="seller"]', '[data-testid*="seller"]'],
    "overlay_close": ['button:has-text("Accept")', 'button:has-text("Got it")', 'button:has-text("Close")'],
}


class SiteConfig:
    """Selectors, URL templates and the renderer hook for one marketplace site."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.config = self._load_config_from_yaml()

        self.scraper_name: str = self.config.get("scraper_name", "whatnot_live_shows")
        self.base_url: str = self.config.get("base_url", "https://www.whatnot.com")
        self.search_url_template: str = self.config.get(
            "search_url_template",
            "https://www.whatnot.com/search?query={query}&referringSource=typed&searchVertical=LIVESTREAM",
        )
        self.selectors: Dict[str, Any] = {**DEFAULT_SELECTORS, **(self.config.get("selectors") or {})}
        self.launch_args: List[str] = list(self.config.get("launch_args") or [])
        self.init_script: Optional[str] = self.config.get("init_script")

    def _load_config_from_yaml(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.error(f"Configuration file not found: {self.config_path}. Using defaults.")
            return {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {self.config_path}: {e}", exc_info=True)
            return {}

        if not isinstance(config_data, dict):
            logger.error(f"YAML content from {self.config_path} did not parse to a dictionary. Using defaults.")
            return {}
        logger.debug(f"Loaded site configuration from {self.config_path}")
        return config_data

    def selector_list(self, key: str) -> List[str]:
        value = self.selectors.get(key) or []
        return [value] if isinstance(value, str) else list(value)
