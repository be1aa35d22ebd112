import os
from typing import Any, List
from reattach.utils.helpers import split_csv

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Number of worker tasks processing the expansion queue
EXPANSION_WORKERS = int(_getenv("EXPANSION_WORKERS", 5))

#: Storage class provisioners whose volumes need their pods recreated after expansion
SUPPORTED_PROVISIONERS = split_csv(
    _getenv("SUPPORTED_PROVISIONERS", "disk.csi.qingcloud.com,csi-qingcloud")
)

#: Seconds to wait before the second check of the resize pending condition
RESIZE_WAIT_INITIAL_DELAY_SECONDS = float(
    _getenv("RESIZE_WAIT_INITIAL_DELAY_SECONDS", 1.0)
)

#: Multiplier applied to the wait between two resize pending checks
RESIZE_WAIT_FACTOR = float(_getenv("RESIZE_WAIT_FACTOR", 2.0))

#: Number of times the resize pending condition is checked before giving up
RESIZE_WAIT_STEPS = int(_getenv("RESIZE_WAIT_STEPS", 12))

#: Base delay in seconds before a failed key is retried
REQUEUE_BASE_DELAY_SECONDS = float(_getenv("REQUEUE_BASE_DELAY_SECONDS", 0.005))

#: Upper bound in seconds for the retry delay of a failing key
REQUEUE_MAX_DELAY_SECONDS = float(_getenv("REQUEUE_MAX_DELAY_SECONDS", 1000.0))

#: Expose Prometheus metrics
METRICS_ENABLED = bool(_getenv("METRICS_ENABLED", True))

#: Port of the Prometheus metrics endpoint
METRICS_PORT = int(_getenv("METRICS_PORT", 8000))


class Settings:
    """Operator settings"""

    expansion_workers: int = EXPANSION_WORKERS
    supported_provisioners: List[str] = SUPPORTED_PROVISIONERS
    resize_wait_initial_delay_seconds: float = RESIZE_WAIT_INITIAL_DELAY_SECONDS
    resize_wait_factor: float = RESIZE_WAIT_FACTOR
    resize_wait_steps: int = RESIZE_WAIT_STEPS
    requeue_base_delay_seconds: float = REQUEUE_BASE_DELAY_SECONDS
    requeue_max_delay_seconds: float = REQUEUE_MAX_DELAY_SECONDS
    metrics_enabled: bool = METRICS_ENABLED
    metrics_port: int = METRICS_PORT

    def __init__(
        self,
        *args,
        expansion_workers: int = None,
        supported_provisioners: List[str] = None,
        resize_wait_initial_delay_seconds: float = None,
        resize_wait_factor: float = None,
        resize_wait_steps: int = None,
        requeue_base_delay_seconds: float = None,
        requeue_max_delay_seconds: float = None,
        metrics_enabled: bool = None,
        metrics_port: int = None,
        **kwargs,
    ):
        if expansion_workers is not None:
            self.expansion_workers = expansion_workers

        if supported_provisioners is not None:
            self.supported_provisioners = split_csv(supported_provisioners)

        if resize_wait_initial_delay_seconds is not None:
            self.resize_wait_initial_delay_seconds = resize_wait_initial_delay_seconds

        if resize_wait_factor is not None:
            self.resize_wait_factor = resize_wait_factor

        if resize_wait_steps is not None:
            self.resize_wait_steps = resize_wait_steps

        if requeue_base_delay_seconds is not None:
            self.requeue_base_delay_seconds = requeue_base_delay_seconds

        if requeue_max_delay_seconds is not None:
            self.requeue_max_delay_seconds = requeue_max_delay_seconds

        if metrics_enabled is not None:
            self.metrics_enabled = metrics_enabled

        if metrics_port is not None:
            self.metrics_port = metrics_port
