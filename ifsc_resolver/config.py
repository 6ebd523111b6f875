"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Optional


# Bundled tables shipped with the package
DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


class IFSCConfig(BaseSettings):
    """IFSC resolver configuration"""

    # Data source configuration
    data_dir: Optional[str] = None  # If None, uses the bundled tables
    ifsc_file: str = "IFSC.json"
    banknames_file: str = "banknames.json"
    sublet_file: str = "sublet.json"
    custom_sublets_file: str = "custom-sublets.json"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    class Config:
        env_prefix = "IFSC_"
        env_file = ".env"
        case_sensitive = False

    def resolved_data_dir(self) -> Path:
        """Directory the four tables are read from"""
        if self.data_dir:
            return Path(self.data_dir)
        return DEFAULT_DATA_DIR


# Global configuration instance
config = IFSCConfig()


def get_config() -> IFSCConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> IFSCConfig:
    """Reload configuration from environment"""
    global config
    config = IFSCConfig()
    return config
