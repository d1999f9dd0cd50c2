from .logging import configure_logging
from .settings import load_settings, build_device_endpoints

__all__ = ["build_device_endpoints", "configure_logging", "load_settings"]
