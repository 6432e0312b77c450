"""
Deployment profiles for the hub map server.

A profile is one YAML file under ``configs/`` with these sections:

- ``storage``: where the address list is kept (``data_file``)
- ``entries``: radius and colours given to addresses added without them
- ``hubs``: the starting car-count threshold (null leaves hubs off)
- ``geocoding``: request timeout, result cache and import concurrency
- ``server``: listening port

``HUBMAP_PROFILE`` picks the profile. ``HUBMAP_DATA_FILE`` and ``PORT`` win
over the values in the file, so one profile can serve several deployments.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

DEFAULT_PROFILE = "default"


class ConfigLoader:
    """Read hub map profiles and apply environment overrides."""

    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"

    @classmethod
    def load_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Read one profile file as a plain dict.

        Args:
            profile_name: File stem under ``configs/`` (``default`` for a
                single depot operator, ``large-fleet`` for wider radii and a
                preset hub threshold)

        Raises:
            FileNotFoundError: If no such profile exists; the message lists
                the profiles that do
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"

        if not profile_path.exists():
            available = sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. Available profiles: {', '.join(available)}"
            )

        with open(profile_path, "r") as f:
            return yaml.safe_load(f) or {}

    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        return os.getenv("HUBMAP_PROFILE")

    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Profile chosen by ``HUBMAP_PROFILE`` (``default`` when unset), with
        the data file and port taken from the environment when given.
        """
        config = cls.load_profile(cls.get_profile_from_env() or DEFAULT_PROFILE)

        data_file = os.getenv("HUBMAP_DATA_FILE")
        if data_file:
            config.setdefault("storage", {})["data_file"] = data_file

        port = os.getenv("PORT")
        if port:
            config.setdefault("server", {})["port"] = int(port)

        return config


def get_config() -> Dict[str, Any]:
    """Active server configuration."""
    return ConfigLoader.load_default_or_env_profile()
