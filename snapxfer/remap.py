# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Restore Node Remapper - rewrites the selected node of restored local PVCs.

A local-storage PVC pins its volume to the node recorded at backup time.
When restoring into a cluster where that node is gone or renamed, the
selected-node annotation is either replaced using the node-mapping config
map, left alone when the node still exists, or removed so that the
scheduler picks a fresh node.

The remapper keeps no state between items.
"""

from typing import Any, Dict, List

from kubernetes.client.rest import ApiException

from snapxfer.exceptions import AmbiguousConfigError, ClusterLookupError
from snapxfer.log import get_logger

PROVISIONER_ANNOTATION = "volume.beta.kubernetes.io/storage-provisioner"
LOCAL_PROVISIONER = "openebs.io/local"
SELECTED_NODE_ANNOTATION = "volume.kubernetes.io/selected-node"
PROCESSED_ANNOTATION = "openebs.io/localpv-plugin"

PLUGIN_NAME = "velero.io/change-pvc-node"
PLUGIN_KIND = "RestoreItemAction"
PLUGIN_CONFIG_SELECTOR = f"velero.io/plugin-config,{PLUGIN_NAME}={PLUGIN_KIND}"

DEFAULT_NAMESPACE = "velero"


def get_plugin_config(core_v1: Any, namespace: str) -> Any | None:
    """
    Return the unique config map labelled for this action, or None.

    Raises:
        AmbiguousConfigError: more than one config map matches the selector
        ClusterLookupError: the config maps could not be listed
    """
    try:
        result = core_v1.list_namespaced_config_map(
            namespace, label_selector=PLUGIN_CONFIG_SELECTOR
        )
    except ApiException as e:
        raise ClusterLookupError(
            f"Failed to list plugin config maps: {e.reason}",
            details={"namespace": namespace, "selector": PLUGIN_CONFIG_SELECTOR},
        ) from e

    items = list(result.items or [])
    if not items:
        return None

    if len(items) > 1:
        names = [item.metadata.name for item in items]
        raise AmbiguousConfigError(
            f"found more than one ConfigMap matching label selector "
            f"{PLUGIN_CONFIG_SELECTOR!r}: {names}",
            details={"namespace": namespace, "config_maps": names},
        )

    return items[0]


def lookup_node_mapping(core_v1: Any, namespace: str, node: str) -> str:
    """
    Return the node that node maps to, or "" when no mapping is defined.

    An explicit empty mapping target is indistinguishable from a missing one.
    """
    config_map = get_plugin_config(core_v1, namespace)
    if config_map is None or not config_map.data:
        return ""
    return config_map.data.get(node, "") or ""


def node_exists(core_v1: Any, name: str) -> bool:
    """
    Check whether a node is registered in the cluster.

    Raises:
        ClusterLookupError: the lookup failed for a reason other than not-found
    """
    try:
        core_v1.read_node(name)
    except ApiException as e:
        if e.status == 404:
            return False
        raise ClusterLookupError(
            f"Failed to check node existence: {e.reason}",
            details={"node": name, "status": e.status},
        ) from e
    return True


class RestoreNodeRemapper:
    """Restore item action for PersistentVolumeClaims."""

    def __init__(self, core_v1: Any, namespace: str = DEFAULT_NAMESPACE, logger: Any = None):
        self.core_v1 = core_v1
        self.namespace = namespace
        self.logger = logger if logger is not None else get_logger()

    @classmethod
    def from_cluster(cls, namespace: str = DEFAULT_NAMESPACE, logger: Any = None) -> "RestoreNodeRemapper":
        """Build a remapper from the in-cluster service account."""
        from kubernetes import client, config

        config.load_incluster_config()
        return cls(client.CoreV1Api(), namespace=namespace, logger=logger)

    def applies_to(self) -> Dict[str, List[str]]:
        return {"included_resources": ["persistentvolumeclaims"]}

    def execute(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """
        Remap the selected node of item in place and return it.

        Raises:
            AmbiguousConfigError: several node-mapping config maps exist
            ClusterLookupError: a config map or node lookup failed
        """
        metadata = item.get("metadata") or {}
        name = metadata.get("name", "")
        log = self.logger.bind(pvc=name, namespace=metadata.get("namespace"))

        annotations = metadata.get("annotations")
        if not annotations:
            return item

        if annotations.get(PROVISIONER_ANNOTATION) != LOCAL_PROVISIONER:
            return item

        log.info("pvc_remap_started")

        node = annotations.get(SELECTED_NODE_ANNOTATION)
        if node is None:
            log.debug("pvc_has_no_selected_node")
            return item

        new_node = lookup_node_mapping(self.core_v1, self.namespace, node)
        if new_node:
            # A mapped node is assumed to exist
            annotations[PROCESSED_ANNOTATION] = "1"
            annotations[SELECTED_NODE_ANNOTATION] = new_node
            log.info("pvc_selected_node_updated", old_node=node, new_node=new_node)
            return item

        try:
            exists = node_exists(self.core_v1, node)
        except ClusterLookupError as e:
            log.error("node_existence_check_failed", node=node, error=str(e))
            raise

        if not exists:
            del annotations[SELECTED_NODE_ANNOTATION]
            log.info("pvc_selected_node_reset", old_node=node)

        return item
