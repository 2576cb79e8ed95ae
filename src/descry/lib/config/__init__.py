"""Configuration loading."""

from descry.lib.config.settings import DescryConfig, load_config, resolve_config_root

__all__ = ["DescryConfig", "load_config", "resolve_config_root"]
