# Task board configuration
# Override defaults via taskboard.yaml, environment variables, or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

CONFIG_PATH = Path.home() / ".config" / "taskboard" / "taskboard.yaml"


@dataclass
class Config:
    """Runtime configuration for the board server."""

    # Storage
    db_path: str = "~/.local/share/taskboard/taskboard.db"

    # HTTP API
    host: str = "127.0.0.1"   # use 0.0.0.0 to expose on the network
    port: int = 3000
    api_secret: str = ""      # empty = mutating routes open (local use)

    # Behavior
    log_level: str = "INFO"
    export_filename: str = "task-board.json"

    def apply_env(self):
        """Environment variables win over the YAML file."""
        if os.environ.get("TASKBOARD_DB"):
            self.db_path = os.environ["TASKBOARD_DB"]
        if os.environ.get("TASKBOARD_API_SECRET"):
            self.api_secret = os.environ["TASKBOARD_API_SECRET"].strip()
        if os.environ.get("TASKBOARD_LOG_LEVEL"):
            self.log_level = os.environ["TASKBOARD_LOG_LEVEL"]

    def resolve_paths(self):
        self.db_path = str(Path(self.db_path).expanduser())

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path).expanduser() if path else CONFIG_PATH
        known = {f.name for f in fields(cls)}
        if cfg_path.exists():
            with open(cfg_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"{cfg_path}: expected a mapping at top level")
            cfg = cls(**{k: v for k, v in data.items() if k in known})
        else:
            cfg = cls()
        cfg.apply_env()
        cfg.port = int(cfg.port)
        cfg.log_level = str(cfg.log_level).upper()
        cfg.resolve_paths()
        return cfg
