"""
Config Manager

Loads the engine configuration from YAML with include support and falls
back to the packaged factory defaults when the user file is missing or
broken.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from forgemotion.models.config import EngineConfig
from forgemotion.models.enums import LogCategory
from forgemotion.models.errors import ConfigError
from forgemotion.utils.logger import get_logger

log = get_logger().for_category(LogCategory.CONFIG)

FACTORY_DEFAULTS = Path(__file__).parent.parent / "config" / "factory_defaults.yaml"


class ConfigManager:
    """
    Configuration manager with include system support

    Loads config.yaml and processes the include: directive to merge modular
    YAML files. Top-level sections of later files replace earlier ones.

    Example:
        config = ConfigManager("site/motion.yaml")
        engine_config = config.load()

        engine_config.fade.duration_ms   # 800
        config.data["scroll"]            # raw merged mapping
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        defaults_path: Union[str, Path] = FACTORY_DEFAULTS,
    ):
        """
        Initialize ConfigManager

        Args:
            config_path: Path to the main YAML file; None loads factory defaults only
            defaults_path: Path to factory defaults fallback
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self.factory_defaults_path = Path(defaults_path)
        self.data: Dict[str, Any] = {}
        self.unknown_keys: List[str] = []
        self.used_defaults = False
        self.config: EngineConfig = EngineConfig()

    def load(self) -> EngineConfig:
        """
        Load YAML configuration with include system support

        Process:
        1. Load main config file
        2. If it has an 'include:' list, load and merge those files
        3. Otherwise treat it as a monolithic config
        4. Fallback to factory defaults on failure
        5. Build the typed EngineConfig

        Returns:
            Parsed EngineConfig

        Raises:
            ConfigError: a value in the loaded configuration is invalid
        """
        if self.config_path is None:
            self.data = self._load_defaults()
        else:
            try:
                main_config = self._read(self.config_path)
                if "include" in main_config:
                    log.info("Using include-based configuration")
                    includes = main_config.pop("include") or []
                    merged = self._load_with_includes(includes, self.config_path.parent)
                    merged.update(main_config)
                    self.data = merged
                else:
                    log.info("Using monolithic configuration")
                    self.data = main_config
            except (OSError, yaml.YAMLError, ConfigError) as ex:
                log.error("Failed to load config", path=str(self.config_path), error=str(ex), error_type=type(ex).__name__)
                log.warn("Falling back to factory defaults")
                self.data = self._load_defaults()

        self.config, self.unknown_keys = EngineConfig.from_dict(self.data)
        for key in self.unknown_keys:
            log.warn("Unknown config key ignored", key=key)

        log.info(
            "Configuration loaded",
            fps=self.config.fps,
            timing=self.config.timing,
            defaults=self.used_defaults,
        )
        return self.config

    def _load_defaults(self) -> Dict[str, Any]:
        self.used_defaults = True
        return self._read(self.factory_defaults_path)

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path.name}: top level must be a mapping, got {type(data).__name__}")
        return data

    def _load_with_includes(self, include_list: List[str], config_dir: Path) -> Dict[str, Any]:
        """
        Load and merge multiple YAML files from include list

        Args:
            include_list: Filenames to load (e.g., ["timing.yaml", "pointer.yaml"])
            config_dir: Directory containing config files

        Returns:
            Merged config dict
        """
        merged: Dict[str, Any] = {}

        for filename in include_list:
            filepath = config_dir / filename
            try:
                file_data = self._read(filepath)
            except FileNotFoundError:
                log.error(f"File not found: {filename}")
                raise
            if file_data:
                merged.update(file_data)
                log.info(f"Loaded {filename}", keys=str(list(file_data.keys())))

        log.info("Config merge complete", total_keys=len(merged), keys=str(list(merged.keys())[:10]))
        return merged
