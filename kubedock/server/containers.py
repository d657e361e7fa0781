"""Container details as reported by the container list and inspect endpoints."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from kubedock.model.database import Database
from kubedock.model.types import Container
from kubedock.server.filters import Filter
from kubedock.server.requests import EndpointConfig

log = logging.getLogger(__name__)

_ZERO_TIME = "0001-01-01T00:00:00Z"
_ZERO_UNIX = -62135596800


@dataclass
class RouterConfig:
    """Settings that influence how requests are served."""

    inspector: bool = False
    port_forward: bool = False
    reverse_proxy: bool = False
    request_cpu: str = ""
    request_memory: str = ""
    runas_user: str = ""
    pull_policy: str = ""
    pre_archive: bool = False
    deploy_as_job: bool = False


def add_network_aliases(container: Container, endpoint: EndpointConfig) -> None:
    """Merge the endpoint aliases into the container's lower-cased aliases."""
    aliases: List[str] = []
    done = {container.short_id}
    for alias in [*container.network_aliases, *endpoint.aliases]:
        if alias not in done:
            lowered = alias.lower()
            aliases.append(lowered)
            done.add(lowered)
    container.network_aliases = aliases


def get_available_ports(container: Container, config: RouterConfig) -> Dict[int, List[int]]:
    """Return the container ports mapped to the list of their public ports."""
    ports: Dict[int, List[int]] = {}

    def add(mapping: Dict[int, int]) -> None:
        for src, dst in mapping.items():
            if src >= 0:
                ports.setdefault(dst, []).append(src)

    if config.port_forward or config.reverse_proxy:
        add(container.host_ports)
        add(container.mapped_ports)
    else:
        add(container.get_service_ports())
    return ports


def get_network_settings_ports(
    container: Container, config: RouterConfig
) -> Dict[str, List[Dict[str, str]]]:
    """Return the ports in the form used by the container details."""
    if not container.host_ip:
        return {}
    return {
        f"{dst}/tcp": [
            {"HostIp": container.host_ip, "HostPort": str(src)}
            for src in dict.fromkeys(srcs)
        ]
        for dst, srcs in get_available_ports(container, config).items()
    }


def get_container_ports(container: Container, config: RouterConfig) -> List[Dict[str, Any]]:
    """Return the ports in the form used by the container list."""
    if not container.host_ip:
        return []
    result = []
    for dst, srcs in get_available_ports(container, config).items():
        for src in dict.fromkeys(srcs):
            entry: Dict[str, Any] = {"IP": container.host_ip, "PrivatePort": dst, "Type": "tcp"}
            if src > 0:
                entry["PublicPort"] = src
            result.append(entry)
    return result


def get_container_names(container: Container) -> List[str]:
    """Return the names by which the container can be identified."""
    names = []
    if container.name:
        names.append("/" + container.name)
    names.append("/" + container.id)
    names.append("/" + container.short_id)
    names.extend("/" + a for a in container.network_aliases if a != container.name)
    return names


def _format_time(created: Optional[datetime]) -> str:
    if created is None:
        return _ZERO_TIME
    return created.strftime("%Y-%m-%dT%H:%M:%SZ")


def _unix_time(created: Optional[datetime]) -> int:
    if created is None:
        return _ZERO_UNIX
    return math.floor(created.timestamp())


def get_container_info(
    db: Database, container: Container, config: RouterConfig, detail: bool
) -> Dict[str, Any]:
    """Return the json details of a container, in full when ``detail`` is set."""
    error = ""
    try:
        networks = db.get_networks_by_ids(container.networks)
    except Exception as exc:
        error += str(exc)
        networks = []
    network_details = {
        netw.name: {"NetworkID": netw.id, "IPAddress": "127.0.0.1"} for netw in networks
    }
    result: Dict[str, Any] = {
        "Id": container.id,
        "Name": "/" + container.name,
        "Image": container.image,
        "Names": get_container_names(container),
        "NetworkSettings": {
            "Networks": network_details,
            "Ports": get_network_settings_ports(container, config),
        },
        "HostConfig": {
            "NetworkMode": "bridge",
            "LogConfig": {"Type": "json-file", "Config": {}},
        },
    }
    if detail:
        result["State"] = {
            "Health": {"Status": container.status_string()},
            "Running": container.running,
            "Status": container.state_string(),
            "Paused": False,
            "Restarting": False,
            "OOMKilled": False,
            "Dead": container.failed,
            "StartedAt": _format_time(container.created),
            "FinishedAt": _ZERO_TIME,
            "ExitCode": 0,
            "Error": error,
        }
        result["Config"] = {
            "Image": container.image,
            "Labels": container.labels,
            "Env": container.env,
            "Cmd": container.cmd,
            "Tty": False,
        }
        result["Created"] = _format_time(container.created)
    else:
        result["Labels"] = container.labels
        result["State"] = container.status_string()
        result["Status"] = container.state_string()
        result["Created"] = _unix_time(container.created)
        result["Ports"] = get_container_ports(container, config)
    return result


def list_containers(db: Database, config: RouterConfig, filters: str = "") -> List[Dict[str, Any]]:
    """Return the summaries of all containers matching the json ``filters``.

    A filter that cannot be parsed is ignored and all containers are listed.
    """
    try:
        selection = Filter(filters)
    except ValueError as exc:
        log.debug("unsupported filter: %s", exc)
        selection = Filter("")
    return [
        get_container_info(db, container, config, False)
        for container in db.get_containers()
        if selection.match(container)
    ]