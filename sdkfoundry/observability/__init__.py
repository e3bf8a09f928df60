from .logging import setup_logging, get_logger, log_performance
from .telemetry import TelemetrySink

__all__ = ["setup_logging", "get_logger", "log_performance", "TelemetrySink"]
