"""Configuration management."""

from .settings import AppConfig, get_default_config, get_template_config

__all__ = ["AppConfig", "get_default_config", "get_template_config"]
