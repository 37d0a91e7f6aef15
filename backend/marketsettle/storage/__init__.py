"""Storage layer for marketsettle - read-only access to deployment records.

The deployment registry is written by the external deploy task; this package
only ever reads it.
"""

from .deployments import (
    DeploymentRecord,
    get_deployment,
    load_registry,
    network_key,
)

__all__ = [
    "DeploymentRecord",
    "get_deployment",
    "load_registry",
    "network_key",
]
