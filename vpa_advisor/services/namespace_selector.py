"""
Namespace selection
"""
import logging
from typing import List, Optional

logger = logging.getLogger(__name__)


def select_namespaces(k8s_client, namespaces: Optional[str] = None) -> List[str]:
    """Explicit comma separated namespaces verbatim, otherwise every namespace in the cluster"""
    if namespaces:
        logger.info(f"Targeting specific namespaces: {namespaces}")
        return namespaces.split(",")

    selected = k8s_client.list_namespaces()
    logger.debug(f"Found {len(selected)} namespaces in cluster")
    return selected
