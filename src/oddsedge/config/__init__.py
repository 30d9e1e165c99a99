"""Engine configuration."""

from oddsedge.config.settings import EngineConfig, get_config, reset_config

__all__ = ["EngineConfig", "get_config", "reset_config"]
