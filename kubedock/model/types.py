"""The records kept for containers, execs, images and networks."""

import io
import logging
import os
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from kubedock.model.quantity import Quantity, parse_quantity
from kubedock.util import tarutil

log = logging.getLogger(__name__)

LABEL_REQUEST_CPU = "com.joyrex2001.kubedock.request-cpu"
LABEL_REQUEST_MEMORY = "com.joyrex2001.kubedock.request-memory"
LABEL_PULL_POLICY = "com.joyrex2001.kubedock.pull-policy"
LABEL_DEPLOY_AS_JOB = "com.joyrex2001.kubedock.deploy-as-job"

_INT = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_PREDEFINED_NETWORKS = {"bridge", "null", "host"}


class PullPolicy(str, Enum):
    """When the cluster should pull the image of a container."""

    IF_NOT_PRESENT = "IfNotPresent"
    ALWAYS = "Always"
    NEVER = "Never"


_PULL_POLICIES = {
    "default": PullPolicy.IF_NOT_PRESENT,
    "notpresent": PullPolicy.IF_NOT_PRESENT,
    "ifnotpresent": PullPolicy.IF_NOT_PRESENT,
    "always": PullPolicy.ALWAYS,
    "allways": PullPolicy.ALWAYS,
    "never": PullPolicy.NEVER,
}


@dataclass(frozen=True)
class EnvVar:
    name: str
    value: str


@dataclass
class ResourceRequirements:
    requests: Dict[str, Quantity] = field(default_factory=dict)
    limits: Dict[str, Quantity] = field(default_factory=dict)


@dataclass
class PreArchive:
    """A tar archive to be copied into the container before it starts."""

    path: str
    archive: bytes


def _parse_int(text: str) -> int:
    if _INT.fullmatch(text) is None:
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _parse_tcp_port(port: str) -> int:
    """Convert ``9000/tcp`` (or plain ``9000``) to the port number."""
    parts = port.split("/")
    if len(parts) > 2:
        raise ValueError(f"could not parse exposed port {port}")
    try:
        number = _parse_int(parts[0])
    except ValueError as exc:
        raise ValueError(f"could not parse exposed port {port}: {exc}") from exc
    if len(parts) == 2 and parts[1] != "tcp":
        raise ValueError(
            f"unsupported protocol {parts[1]} for port: {number} - only tcp is supported"
        )
    return number


def _tcp_ports(ports: Optional[Dict[str, Any]]) -> List[int]:
    result = []
    for port in ports or {}:
        try:
            result.append(_parse_tcp_port(port))
        except ValueError:
            log.error("could not parse exposed port %s", port)
    return result


@dataclass
class Container:
    """The details of a container."""

    id: str = ""
    short_id: str = ""
    name: str = ""
    image: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    user: str = ""
    entrypoint: List[str] = field(default_factory=list)
    cmd: List[str] = field(default_factory=list)
    env: List[str] = field(default_factory=list)
    binds: List[str] = field(default_factory=list)
    pre_archives: List[PreArchive] = field(default_factory=list)
    host_ip: str = ""
    exposed_ports: Dict[str, Any] = field(default_factory=dict)
    image_ports: Dict[str, Any] = field(default_factory=dict)
    host_ports: Dict[int, int] = field(default_factory=dict)
    mapped_ports: Dict[int, int] = field(default_factory=dict)
    networks: Dict[str, Any] = field(default_factory=dict)
    network_aliases: List[str] = field(default_factory=list)
    stop_channels: List[threading.Event] = field(default_factory=list)
    attach_channels: List[threading.Event] = field(default_factory=list)
    running: bool = False
    completed: bool = False
    failed: bool = False
    stopped: bool = False
    killed: bool = False
    created: Optional[datetime] = None

    def get_env_vars(self) -> List[EnvVar]:
        """Return the ``NAME=value`` environment entries as EnvVars."""
        result = []
        for entry in self.env:
            parts = entry.split("=")
            if len(parts) != 2:
                log.error("could not parse env %s", entry)
                continue
            result.append(EnvVar(parts[0], parts[1]))
        return result

    def get_image_pull_policy(self) -> PullPolicy:
        """Return the pull policy from the labels; ValueError if it is invalid."""
        policy = self.labels.get(LABEL_PULL_POLICY, "")
        if not policy:
            return _PULL_POLICIES["default"]
        try:
            return _PULL_POLICIES[policy.lower()]
        except KeyError:
            raise ValueError(f"invalid pull policy: {policy}") from None

    def run_as_job(self) -> bool:
        """Return True if the labels ask for a job instead of a deployment."""
        return self.labels.get(LABEL_DEPLOY_AS_JOB, "") in _TRUE

    def get_resource_requirements(self) -> ResourceRequirements:
        """Return requests and limits from the ``request,limit`` labels."""
        req = ResourceRequirements()
        for kind, label in (("cpu", LABEL_REQUEST_CPU), ("memory", LABEL_REQUEST_MEMORY)):
            if label not in self.labels:
                continue
            spec = self.labels[label]
            parts = spec.replace(" ", "").split(",")
            if len(parts) > 2:
                raise ValueError(f"invalid resource requirement: {spec}")
            request = parts[0]
            limit = parts[1] if len(parts) == 2 else ""
            if not request and limit:
                request = limit
            req.requests[kind] = parse_quantity(request)
            if limit:
                req.limits[kind] = parse_quantity(limit)
        return req

    def get_run_as_user(self) -> Optional[int]:
        """Return the numeric user to run as, or None to use the image's user."""
        if not self.user:
            log.warning("user not set, will run as user defined in image")
            return None
        try:
            uid = _parse_int(self.user)
        except ValueError:
            uid = None
        if uid is None or not _INT64_MIN <= uid <= _INT64_MAX:
            raise ValueError(f"failed to parse {self.user} to Int64")
        return uid

    def map_port(self, pod: int, local: int) -> None:
        """Map a pod port to a local port."""
        self.mapped_ports[pod] = local

    def add_host_port(self, src: str, dst: str) -> None:
        """Add a predefined port mapping; an empty ``src`` maps to ``-dst``."""
        dst_port = _parse_tcp_port(dst)
        if src:
            try:
                src_port = _parse_int(src)
            except ValueError as exc:
                raise ValueError(f"could not parse exposed port {dst}: {exc}") from exc
        else:
            src_port = -dst_port
        self.host_ports[src_port] = dst_port

    def get_container_tcp_ports(self) -> List[int]:
        return _tcp_ports(self.exposed_ports)

    def get_image_tcp_ports(self) -> List[int]:
        return _tcp_ports(self.image_ports)

    def get_service_ports(self) -> Dict[int, int]:
        """Return the port mapping to apply on a cluster service."""
        ports = {p: p for p in self.get_image_tcp_ports()}
        ports.update((p, p) for p in self.get_container_tcp_ports())
        for mapping in (self.host_ports, self.mapped_ports):
            for src, dst in mapping.items():
                ports[dst if src < 0 else src] = dst
        return ports

    def get_volumes(self) -> Dict[str, str]:
        """Return the bind mounts as target location -> local location."""
        mounts = {}
        for bind in self.binds:
            parts = bind.split(":")
            if len(parts) < 2:
                raise ValueError(f"invalid bind: {bind}")
            mounts[parts[1]] = parts[0]
        return mounts

    def get_volume_folders(self) -> Dict[str, str]:
        return {dst: src for dst, src in self.get_volumes().items() if os.path.isdir(src)}

    def get_volume_files(self) -> Dict[str, str]:
        return {
            dst: src
            for dst, src in self.get_volumes().items()
            if os.path.exists(src) and not os.path.isdir(src)
        }

    def get_pre_archive_files(self) -> Dict[str, bytes]:
        """Return the single files of the pre-archives as target path -> contents."""
        files = {}
        for pre in self.pre_archives:
            try:
                names = tarutil.get_target_file_names(pre.path, pre.archive)
            except Exception as exc:
                log.error("error determining pre archive filenames: %s", exc)
                continue
            if len(names) != 1:
                continue
            try:
                files[names[0]] = tarutil.unpack_file(
                    pre.path, names[0], io.BytesIO(pre.archive)
                )
            except Exception as exc:
                log.error("error extracting %s from archive: %s", names[0], exc)
        return files

    def has_volumes(self) -> bool:
        return len(self.binds) > 0

    def add_stop_channel(self, event: threading.Event) -> None:
        """Register an event to be set by :meth:`signal_stop`."""
        self.stop_channels.append(event)

    def signal_stop(self) -> None:
        for event in self.stop_channels:
            event.set()
        self.stop_channels = []

    def add_attach_channel(self, event: threading.Event) -> None:
        """Register an event to be set by :meth:`signal_detach`."""
        self.attach_channels.append(event)

    def signal_detach(self) -> None:
        for event in self.attach_channels:
            event.set()
        self.attach_channels = []

    def connect_network(self, network_id: str) -> None:
        self.networks[network_id] = None

    def disconnect_network(self, network_id: str) -> None:
        """Detach a network; ValueError for the bridge or an unknown network."""
        if network_id == "bridge":
            raise ValueError("can't delete bridge network")
        if network_id not in self.networks:
            raise ValueError(f"container is not connected to network {network_id}")
        del self.networks[network_id]

    def match(self, typ: str, key: str, value: str) -> bool:
        """Match a filter condition of the given type."""
        if typ == "name":
            return self.name == key
        if typ != "label":
            return True
        return key in self.labels and self.labels[key] == value

    def state_string(self) -> str:
        if self.running:
            return "Up"
        if self.stopped or self.killed or self.failed:
            return "Dead"
        if self.completed:
            return "Exited"
        return "Created"

    def status_string(self) -> str:
        return "healthy" if self.running else "unhealthy"


@dataclass
class Exec:
    """The details of an exec command."""

    id: str = ""
    container_id: str = ""
    cmd: List[str] = field(default_factory=list)
    stdout: bool = False
    stderr: bool = False
    exit_code: int = 0
    created: Optional[datetime] = None


@dataclass
class Image:
    """The details of an image."""

    id: str = ""
    short_id: str = ""
    name: str = ""
    exposed_ports: Dict[str, Any] = field(default_factory=dict)
    created: Optional[datetime] = None


@dataclass
class Network:
    """The details of a network."""

    id: str = ""
    short_id: str = ""
    name: str = ""
    created: Optional[datetime] = None

    def is_predefined(self) -> bool:
        """Return True for the built-in system networks."""
        return self.name in _PREDEFINED_NETWORKS