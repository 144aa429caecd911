"""Factory wiring a MetricsLogger to environment detection."""

from emfkit.adapters.environment.detector import EnvironmentDetector
from emfkit.adapters.logging import configure_debug_logging
from emfkit.core.config import Configuration, get_config
from emfkit.core.context import MetricsContext
from emfkit.core.logger import MetricsLogger

_detector: EnvironmentDetector | None = None


def get_detector() -> EnvironmentDetector:
    """Return the process-wide detector so detection runs at most once."""
    global _detector
    if _detector is None:
        _detector = EnvironmentDetector(get_config())
    return _detector


def reset_detector() -> None:
    global _detector
    _detector = None


def create_metrics_logger(config: Configuration | None = None) -> MetricsLogger:
    """Create a MetricsLogger for the detected environment.

    Args:
        config: Configuration to use. Defaults to the process-wide one, in
            which case the environment detection result is shared.
    """
    detector = get_detector() if config is None else EnvironmentDetector(config)
    if detector.config.debug_logging_enabled:
        configure_debug_logging(True)
    context = MetricsContext.empty(config=detector.config)
    return MetricsLogger(detector.resolve, context)
