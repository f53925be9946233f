"""Lessee identity detection and validation."""

import logging
import os
import socket
from uuid import uuid4

logger = logging.getLogger(__name__)


def detect_lessee_id() -> str:
    """
    Auto-detect a lessee identifier for this process from its environment.

    Checks in priority order:
    1. Explicit: LEASELOCKER_LESSEE_ID
    2. Fly.io: FLY_ALLOC_ID
    3. Kubernetes: HOSTNAME (pod name)
    4. AWS ECS: ECS_CONTAINER_METADATA_URI_V4 -> container ID
    5. Cloud Run: K_REVISION plus a random suffix
    6. Fallback: hostname + pid + random suffix

    The identity is the owner marker written to the store, so two processes
    must never share one. Detected once and reused for the whole session.
    """
    explicit_id = os.environ.get("LEASELOCKER_LESSEE_ID")
    if explicit_id:
        logger.info(f"Using explicit lessee ID: {explicit_id}")
        return explicit_id

    fly_alloc_id = os.environ.get("FLY_ALLOC_ID")
    if fly_alloc_id:
        logger.info(f"Detected Fly.io lessee: {fly_alloc_id}")
        return fly_alloc_id

    k8s_hostname = os.environ.get("HOSTNAME")
    if k8s_hostname and "-" in k8s_hostname:  # Likely K8s naming
        logger.info(f"Detected Kubernetes lessee: {k8s_hostname}")
        return k8s_hostname

    ecs_metadata_uri = os.environ.get("ECS_CONTAINER_METADATA_URI_V4")
    if ecs_metadata_uri:
        container_id = ecs_metadata_uri.rstrip("/").split("/")[-1]
        if container_id:
            lessee_id = f"ecs-{container_id[:12]}"
            logger.info(f"Detected AWS ECS lessee: {lessee_id}")
            return lessee_id
        logger.warning(f"Failed to parse ECS metadata URI: {ecs_metadata_uri}")

    cloud_run_revision = os.environ.get("K_REVISION")
    if cloud_run_revision:
        # Revision is shared by every replica
        lessee_id = f"{cloud_run_revision}-{str(uuid4())[:8]}"
        logger.info(f"Detected Cloud Run lessee: {lessee_id}")
        return lessee_id

    try:
        hostname = socket.gethostname()
    except OSError as e:
        lessee_id = f"leaselocker-{uuid4()}"
        logger.error(f"Failed to detect hostname, using random ID: {lessee_id} (error: {e})")
        return lessee_id

    lessee_id = f"{hostname}-{os.getpid()}-{str(uuid4())[:8]}"
    logger.info(f"No deployment environment detected, using: {lessee_id}")
    return lessee_id


def validate_lessee_id(lessee_id: str, env: str) -> None:
    """
    Reject lessee IDs that could collide across processes outside development.

    Raises:
        RuntimeError: If lessee_id is unsafe for the environment
    """
    if not lessee_id:
        raise RuntimeError("lessee_id must not be empty")

    if env in ("staging", "production"):
        for pattern in ("localhost", "127.0.0.1", "leaselocker"):
            if lessee_id == pattern:
                raise RuntimeError(
                    f"LESSEE ID CONFLICT RISK: lessee_id='{lessee_id}' is not safe for "
                    f"{env}. Processes sharing an ID renew each other's leases.\n"
                    f"Set LEASELOCKER_LESSEE_ID to a unique value per process."
                )
        if len(lessee_id) < 8:
            logger.warning(
                f"Lessee ID '{lessee_id}' is very short for {env} environment. "
                f"Consider a more unique identifier."
            )

    logger.info(f"Lessee ID validated: {lessee_id} (env: {env})")
