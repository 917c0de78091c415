"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_FALSE_VALUES = {"0", "false", "no", "off"}


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "netpolgraph"
    return Path.home() / ".config" / "netpolgraph"


@dataclass
class NetpolGraphConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    policy_dirs: list[Path] = field(default_factory=list)
    deduplicate: bool = True
    web_host: str = "127.0.0.1"  # Hardcoded — never 0.0.0.0
    web_port: int = 8480
    verbose: bool = False

    @classmethod
    def load(cls) -> NetpolGraphConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_dedup = os.environ.get("NETPOLGRAPH_DEDUPLICATE")
        if env_dedup:
            config.deduplicate = env_dedup.strip().lower() not in _FALSE_VALUES

        env_port = os.environ.get("NETPOLGRAPH_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        # Add config dir's policies/ subdirectory if it exists
        policies_dir = config.config_dir / "policies"
        if policies_dir.is_dir():
            config.policy_dirs.append(policies_dir)

        return config

    def policy_files(self) -> list[Path]:
        """Every policy document found in ``policy_dirs``, sorted by path."""
        files: list[Path] = []
        for directory in self.policy_dirs:
            for pattern in ("*.yaml", "*.yml", "*.json"):
                files.extend(directory.glob(pattern))
        return sorted(files)
