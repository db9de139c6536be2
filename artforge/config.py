import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from blinker import Signal
from platformdirs import user_config_dir, user_data_dir


logger = logging.getLogger(__name__)


CONFIG_DIR = Path(user_config_dir("artforge"))
DATA_DIR = Path(user_data_dir("artforge"))
CONFIG_FILE = CONFIG_DIR / "config.yaml"
AUTOSAVE_FILE = DATA_DIR / "autosave.json"
VERSIONS_FILE = DATA_DIR / "versions.json"


def getflag(name: str, default: bool = False) -> bool:
    value = "true" if default else "false"
    return os.environ.get(name, value).lower() in ("true", "1")


class CanvasConfig:
    """
    Tunable interaction behavior, persisted as YAML. Whether snapping is
    on is a property of the document, not of the configuration.
    """

    def __init__(self):
        self.grid_size: float = 20.0
        self.aspect_locked: bool = False
        self.min_size: float = 20.0
        # A dragged node within this distance of another node's position
        # snaps to the finer proximity grid instead.
        self.proximity_threshold: float = 10.0
        self.proximity_grid: float = 10.0
        self.changed = Signal()

    def set(self, name: str, value: Any):
        if not hasattr(self, name) or name == "changed":
            raise ValueError(f"Unknown config option '{name}'")
        if getattr(self, name) == value:
            return
        setattr(self, name, value)
        self.changed.send(self, name=name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid_size": self.grid_size,
            "aspect_locked": self.aspect_locked,
            "min_size": self.min_size,
            "proximity_threshold": self.proximity_threshold,
            "proximity_grid": self.proximity_grid,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanvasConfig":
        config = cls()
        for key, default in config.to_dict().items():
            setattr(config, key, data.get(key, default))
        return config


class ConfigManager:
    def __init__(self, filepath: Path = CONFIG_FILE):
        self.filepath = Path(filepath)
        self.config: CanvasConfig = CanvasConfig()
        self.load_config()

    def save(self) -> bool:
        try:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(self.filepath, "w") as f:
                yaml.safe_dump(self.config.to_dict(), f)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
            return False
        return True

    def load_config(self) -> CanvasConfig:
        if not self.filepath.exists():
            self.config = CanvasConfig()  # Use a default config
            return self.config

        try:
            with open(self.filepath, "r") as f:
                data: Optional[Dict[str, Any]] = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(
                f"Could not read {self.filepath}, using defaults: {e}"
            )
            data = None

        if not isinstance(data, dict):
            self.config = CanvasConfig()
            return self.config

        self.config = CanvasConfig.from_dict(data)
        logger.info(f"Config loaded from {self.filepath}")
        return self.config
