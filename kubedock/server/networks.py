"""Network management as served by the network endpoints."""

import logging
from typing import Any, Dict, List, Mapping, Union

from kubedock.model.database import Database, NotFoundError
from kubedock.model.types import Container, Network
from kubedock.server.containers import add_network_aliases
from kubedock.server.requests import (
    ApiError,
    NetworkConnectRequest,
    NetworkCreateRequest,
    NetworkDisconnectRequest,
)

log = logging.getLogger(__name__)

_BAD_REQUEST = 400
_FORBIDDEN = 403
_NOT_FOUND = 404
_SERVER_ERROR = 500


class NetworkService:
    """Lists, inspects, creates, removes and (dis)connects networks.

    Failures are raised as ApiError carrying the http status to report.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def list(self) -> List[Dict[str, Any]]:
        """Return the details of every network."""
        try:
            networks = self.db.get_networks()
        except Exception as exc:
            raise ApiError(_SERVER_ERROR, str(exc)) from exc
        return [self._details(netw) for netw in networks]

    def info(self, id: str) -> Dict[str, Any]:
        """Return the details of the network with the given id or name."""
        return self._details(self._network(id))

    def create(
        self, request: Union[NetworkCreateRequest, Mapping[str, Any]]
    ) -> Dict[str, str]:
        """Create a network and return its id."""
        if not isinstance(request, NetworkCreateRequest):
            request = NetworkCreateRequest.from_dict(request)
        network = Network(name=request.name)
        try:
            self.db.save_network(network)
        except Exception as exc:
            raise ApiError(_SERVER_ERROR, str(exc)) from exc
        return {"Id": network.id}

    def delete(self, id: str) -> None:
        """Remove a network that is neither predefined nor in use."""
        network = self._network(id)
        if network.is_predefined():
            raise ApiError(
                _FORBIDDEN,
                f"{network.name} is a pre-defined network and cannot be removed",
            )
        if self.containers_in_network(network):
            raise ApiError(_FORBIDDEN, "cannot delete network, containers attachd")
        try:
            self.db.delete_network(network)
        except Exception as exc:
            raise ApiError(_NOT_FOUND, str(exc)) from exc

    def connect(
        self, id: str, request: Union[NetworkConnectRequest, Mapping[str, Any]]
    ) -> Dict[str, str]:
        """Connect a container to a network, adding the requested aliases."""
        if not isinstance(request, NetworkConnectRequest):
            request = NetworkConnectRequest.from_dict(request)
        network = self._network(id)
        container = self._container(request.container)

        container.connect_network(network.id)
        before = len(container.network_aliases)
        add_network_aliases(container, request.endpoint_config)
        if container.running and before != len(container.network_aliases):
            log.warning(
                "adding networkaliases to a running container, "
                "will not create new services..."
            )
        self._save(container)
        return {"ID": network.id}

    def disconnect(
        self, id: str, request: Union[NetworkDisconnectRequest, Mapping[str, Any]]
    ) -> None:
        """Disconnect a container from the network referred to by ``id``."""
        if not isinstance(request, NetworkDisconnectRequest):
            request = NetworkDisconnectRequest.from_dict(request)
        self._network(id)
        container = self._container(request.container)
        try:
            container.disconnect_network(id)
        except ValueError as exc:
            raise ApiError(_NOT_FOUND, str(exc)) from exc
        self._save(container)

    def prune(self) -> Dict[str, List[str]]:
        """Delete every unused, user-defined network; return their names."""
        try:
            networks = self.db.get_networks()
        except Exception as exc:
            raise ApiError(_SERVER_ERROR, str(exc)) from exc
        names = []
        for network in networks:
            if network.is_predefined() or self.containers_in_network(network):
                continue
            try:
                self.db.delete_network(network)
            except Exception as exc:
                raise ApiError(_NOT_FOUND, str(exc)) from exc
            names.append(network.name)
        return {"NetworksDeleted": names}

    def containers_in_network(self, network: Network) -> Dict[str, Dict[str, str]]:
        """Return the containers attached to the network, keyed by id."""
        try:
            containers = self.db.get_containers()
        except Exception as exc:
            log.error("error retrieving containers: %s", exc)
            return {}
        return {
            container.id: {"Name": container.name}
            for container in containers
            if network.id in container.networks
        }

    def _details(self, network: Network) -> Dict[str, Any]:
        return {
            "Name": network.name,
            "ID": network.id,
            "Driver": "bridge",
            "Scope": "local",
            "Attachable": True,
            "Containers": self.containers_in_network(network),
        }

    def _network(self, id: str) -> Network:
        try:
            return self.db.get_network_by_name_or_id(id)
        except NotFoundError as exc:
            raise ApiError(_NOT_FOUND, str(exc)) from exc

    def _container(self, id: str) -> Container:
        try:
            return self.db.get_container(id)
        except NotFoundError as exc:
            raise ApiError(_NOT_FOUND, str(exc)) from exc

    def _save(self, container: Container) -> None:
        try:
            self.db.save_container(container)
        except Exception as exc:
            raise ApiError(_SERVER_ERROR, str(exc)) from exc