import asyncio
import kopf
import logging
import reattach.handlers.claims as claims
from reattach.types.settings import Settings
from reattach.resources.cluster import ClusterClient
from reattach.controller import ClaimEventTracker, VolumeExpansionController
from reattach.common.events import KopfEventRecorder
from reattach.sensors import init_metrics_server, SensorDelegate, PrometheusMonitor
from kubernetes_asyncio import config
from kubernetes_asyncio.client.api_client import ApiClient


# Configure Kopf settings
@kopf.on.startup()
async def setup(
    settings: kopf.OperatorSettings, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    # Load Kubernetes config - try in-cluster first (for production), then local kubeconfig (for dev)
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        logger.info("In-cluster config not found, trying local kubeconfig")
        try:
            await config.load_kube_config()
            logger.info("Loaded local Kubernetes configuration")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    memo.conf = Settings()

    # One shared ApiClient for all reads and scale calls
    memo.api_client = ApiClient()
    client = ClusterClient(memo.api_client)
    logger.info("Shared Kubernetes API client initialized")

    sensor_delegate = SensorDelegate()
    sensor_delegate.add(PrometheusMonitor())
    memo.sensor = sensor_delegate
    logger.info("Sensor infrastructure initialized with PrometheusMonitor")

    if memo.conf.metrics_enabled:
        try:
            init_metrics_server(memo.conf.metrics_port)
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            # Don't fail operator startup if metrics server fails
            logger.warning("Continuing without metrics server")

    logger.info(
        f"Reattaching workloads for provisioners: {', '.join(memo.conf.supported_provisioners) or '(none)'}"
    )
    if not memo.conf.supported_provisioners:
        logger.warning("No supported provisioners configured, no claim will be handled")

    controller = VolumeExpansionController(
        client,
        settings=memo.conf,
        sensor=sensor_delegate,
        recorder=KopfEventRecorder(),
    )
    memo.controller = controller
    memo.claim_tracker = ClaimEventTracker(controller)
    memo.stop = asyncio.Event()
    memo.controller_task = asyncio.create_task(controller.start(memo.stop))

    # Post events to the Kubernetes API for logging >= Warning
    settings.posting.enabled = True
    settings.posting.level = logging.WARNING


@kopf.on.cleanup()
async def cleanup(memo: kopf.Memo, logger: logging.Logger, **kwargs):
    """Cleanup handler for operator shutdown."""
    logger.info("Shutting down operator...")

    stop = getattr(memo, "stop", None)
    task = getattr(memo, "controller_task", None)
    if stop is not None:
        stop.set()
    if task is not None:
        await task
        logger.info("Volume expansion controller stopped")

    api_client = getattr(memo, "api_client", None)
    if api_client is not None:
        await api_client.close()
        logger.info("Shared API client closed")

    logger.info("Operator shutdown complete")


__all__ = [
    "claims",
]
