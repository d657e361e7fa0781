"""Helpers for building port-forward requests against the cluster API."""

from urllib.parse import urlunsplit


def get_url(host: str, namespace: str, pod_name: str) -> str:
    """Return the https url of the port-forward endpoint of a pod."""
    path = f"/api/v1/namespaces/{namespace}/pods/{pod_name}/portforward"
    return urlunsplit(("https", host.removeprefix("https://"), path, "", ""))


def port_spec(local_port: int, pod_port: int) -> str:
    """Return the ``local:pod`` port specification of a forward."""
    return f"{local_port}:{pod_port}"