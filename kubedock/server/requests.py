"""The json request bodies accepted by the container and network endpoints."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class ApiError(Exception):
    """An error to be reported to the client with an http status code."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def to_json(self) -> Dict[str, str]:
        """Return the error as the json body sent to the client."""
        return {"message": self.message}


_DECODE_STATUS = 500


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Return the value for ``key``, matching field names case-insensitively."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return None


def _invalid(key: str, value: Any) -> ApiError:
    return ApiError(_DECODE_STATUS, f"invalid value for field {key}: {value!r}")


def _object(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ApiError(_DECODE_STATUS, f"expected a json object for {what}")
    return data


def _str(data: Mapping[str, Any], key: str) -> str:
    value = _lookup(data, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _invalid(key, value)
    return value


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = _lookup(data, key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _invalid(key, value)
    return value


def _int(data: Mapping[str, Any], key: str) -> int:
    value = _lookup(data, key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(key, value)
    return value


def _str_list(data: Mapping[str, Any], key: str) -> Optional[List[str]]:
    value = _lookup(data, key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise _invalid(key, value)
    result = []
    for item in value:
        if item is None:
            result.append("")
        elif isinstance(item, str):
            result.append(item)
        else:
            raise _invalid(key, value)
    return result


def _str_map(data: Mapping[str, Any], key: str) -> Dict[str, str]:
    value = _lookup(data, key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _invalid(key, value)
    result = {}
    for name, item in value.items():
        if item is None:
            result[name] = ""
        elif isinstance(item, str):
            result[name] = item
        else:
            raise _invalid(key, value)
    return result


def _any_map(data: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = _lookup(data, key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _invalid(key, value)
    return dict(value)


@dataclass
class EndpointConfig:
    """Information about a network endpoint."""

    aliases: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "EndpointConfig":
        data = _object(data, "EndpointConfig")
        return cls(aliases=_str_list(data, "Aliases") or [])


@dataclass
class PortBinding:
    """A binding of a container port to a host port."""

    host_port: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "PortBinding":
        data = _object(data, "PortBinding")
        return cls(host_port=_str(data, "HostPort"))


@dataclass
class HostConfig:
    """Host related settings: mounts, port bindings and resources."""

    binds: List[str] = field(default_factory=list)
    port_bindings: Dict[str, List[PortBinding]] = field(default_factory=dict)
    memory: int = 0
    nano_cpus: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "HostConfig":
        data = _object(data, "HostConfig")
        raw = _lookup(data, "PortBindings")
        bindings: Dict[str, List[PortBinding]] = {}
        if raw is not None:
            if not isinstance(raw, Mapping):
                raise _invalid("PortBindings", raw)
            for port, entries in raw.items():
                if entries is None:
                    bindings[port] = []
                    continue
                if not isinstance(entries, list):
                    raise _invalid("PortBindings", raw)
                bindings[port] = [PortBinding.from_dict(e) for e in entries]
        return cls(
            binds=_str_list(data, "Binds") or [],
            port_bindings=bindings,
            memory=_int(data, "Memory"),
            nano_cpus=_int(data, "NanoCpus"),
        )


@dataclass
class NetworkingConfig:
    """The endpoint configuration per network."""

    endpoints_config: Dict[str, EndpointConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "NetworkingConfig":
        data = _object(data, "NetworkingConfig")
        raw = _lookup(data, "EndpointsConfig")
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise _invalid("EndpointsConfig", raw)
        return cls({name: EndpointConfig.from_dict(v) for name, v in raw.items()})


@dataclass
class ContainerCreateRequest:
    """The body of a container create request."""

    name: str = ""
    image: str = ""
    exposed_ports: Dict[str, Any] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    entrypoint: List[str] = field(default_factory=list)
    cmd: List[str] = field(default_factory=list)
    env: List[str] = field(default_factory=list)
    user: str = ""
    host_config: HostConfig = field(default_factory=HostConfig)
    network_config: NetworkingConfig = field(default_factory=NetworkingConfig)

    @classmethod
    def from_dict(cls, data: Any) -> "ContainerCreateRequest":
        data = _object(data, "container create request")
        return cls(
            name=_str(data, "name"),
            image=_str(data, "image"),
            exposed_ports=_any_map(data, "ExposedPorts"),
            labels=_str_map(data, "Labels"),
            entrypoint=_str_list(data, "Entrypoint") or [],
            cmd=_str_list(data, "Cmd") or [],
            env=_str_list(data, "Env") or [],
            user=_str(data, "User"),
            host_config=HostConfig.from_dict(_lookup(data, "HostConfig")),
            network_config=NetworkingConfig.from_dict(_lookup(data, "NetworkingConfig")),
        )


@dataclass
class ContainerExecRequest:
    """The body of an exec create request; ``env`` is None when not given."""

    cmd: List[str] = field(default_factory=list)
    stdin: bool = False
    stdout: bool = False
    stderr: bool = False
    tty: bool = False
    env: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ContainerExecRequest":
        data = _object(data, "exec request")
        return cls(
            cmd=_str_list(data, "Cmd") or [],
            stdin=_bool(data, "AttachStdin"),
            stdout=_bool(data, "AttachStdout"),
            stderr=_bool(data, "AttachStderr"),
            tty=_bool(data, "Tty"),
            env=_str_list(data, "Env"),
        )


@dataclass
class ExecStartRequest:
    """The body of an exec start request."""

    detach: bool = False
    tty: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "ExecStartRequest":
        data = _object(data, "exec start request")
        return cls(detach=_bool(data, "Detach"), tty=_bool(data, "Tty"))


@dataclass
class NetworkCreateRequest:
    """The body of a network create request."""

    name: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "NetworkCreateRequest":
        data = _object(data, "network create request")
        return cls(name=_str(data, "Name"))


@dataclass
class NetworkConnectRequest:
    """The body of a network connect request."""

    container: str = ""
    endpoint_config: EndpointConfig = field(default_factory=EndpointConfig)

    @classmethod
    def from_dict(cls, data: Any) -> "NetworkConnectRequest":
        data = _object(data, "network connect request")
        return cls(
            container=_str(data, "container"),
            endpoint_config=EndpointConfig.from_dict(_lookup(data, "EndpointConfig")),
        )


@dataclass
class NetworkDisconnectRequest:
    """The body of a network disconnect request."""

    container: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "NetworkDisconnectRequest":
        data = _object(data, "network disconnect request")
        return cls(container=_str(data, "container"))