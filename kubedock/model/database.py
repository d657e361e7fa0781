"""An in-memory store for containers, execs, networks and images."""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Collection, Dict, List, Optional

from kubedock.model.types import Container, Exec, Image, Network
from kubedock.util.stringid import generate_random_id, is_short_id, truncate_id

_DEFAULT_NETWORKS = ("null", "host", "bridge")


class NotFoundError(LookupError):
    """Raised when a record does not exist."""


@dataclass(frozen=True)
class _Index:
    field: str
    unique: bool = False
    allow_missing: bool = False


class _Table:
    """Records keyed by id, with lookups on further indexed fields."""

    def __init__(self, *indexes: _Index) -> None:
        self._indexes = {index.field: index for index in indexes}
        self._records: Dict[str, Any] = {}

    def insert(self, record: Any) -> None:
        for index in self._indexes.values():
            if not getattr(record, index.field) and not index.allow_missing:
                raise ValueError(f"missing value for index '{index.field}'")
        # Re-inserting moves the record to the end, so the latest save wins
        # on unique indexes.
        self._records.pop(record.id, None)
        self._records[record.id] = record

    def delete(self, record: Any) -> None:
        if record.id not in self._records:
            raise NotFoundError("not found")
        del self._records[record.id]

    def first(self, field: str, value: str) -> Optional[Any]:
        if not value:
            return None
        matches = [r for r in self._records.values() if getattr(r, field) == value]
        if not matches:
            return None
        if self._indexes[field].unique:
            return matches[-1]
        return min(matches, key=lambda r: r.id)

    def all(self) -> List[Any]:
        return sorted(self._records.values(), key=lambda r: r.id)


class Database:
    """Thread-safe in-memory database, preloaded with the system networks."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tables = {
            "container": _Table(
                _Index("id", unique=True),
                _Index("short_id", unique=True),
                _Index("name", allow_missing=True),
            ),
            "exec": _Table(_Index("id", unique=True)),
            "network": _Table(
                _Index("id", unique=True),
                _Index("short_id", unique=True),
                _Index("name", unique=True),
            ),
            "image": _Table(
                _Index("id", unique=True),
                _Index("short_id", unique=True),
                _Index("name", allow_missing=True),
            ),
        }
        for name in _DEFAULT_NETWORKS:
            self.save_network(Network(name=name))

    # containers

    def get_container(self, id: str) -> Container:
        """Return the container with the given id, short id or name."""
        with self._lock:
            table = self._tables["container"]
            found = table.first("short_id" if is_short_id(id) else "id", id)
            if found is None:
                found = table.first("name", id)
        return self._found("container", id, found)

    def get_container_by_name(self, name: str) -> Container:
        with self._lock:
            found = self._tables["container"].first("name", name)
        return self._found("container", name, found)

    def get_container_by_name_or_id(self, id: str) -> Container:
        try:
            return self.get_container(id)
        except NotFoundError:
            return self.get_container_by_name(id)

    def get_containers(self) -> List[Container]:
        return self._all("container")

    def save_container(self, container: Container) -> None:
        """Store or update a container; a new one gets an id and creation time."""
        if not container.id:
            container.id = generate_random_id()
            container.short_id = truncate_id(container.id)
            container.created = datetime.now()
        self._save("container", container)

    def delete_container(self, container: Container) -> None:
        self._delete("container", container)

    # execs

    def get_exec(self, id: str) -> Exec:
        with self._lock:
            found = self._tables["exec"].first("id", id)
        return self._found("exec", id, found)

    def get_execs(self) -> List[Exec]:
        return self._all("exec")

    def save_exec(self, exc: Exec) -> None:
        """Store or update an exec; a new one gets an id and creation time."""
        if not exc.id:
            exc.id = generate_random_id()
            exc.created = datetime.now()
        self._save("exec", exc)

    def delete_exec(self, exc: Exec) -> None:
        self._delete("exec", exc)

    # networks

    def get_network(self, id: str) -> Network:
        with self._lock:
            table = self._tables["network"]
            found = table.first("short_id" if is_short_id(id) else "id", id)
        return self._found("network", id, found)

    def get_network_by_name(self, name: str) -> Network:
        with self._lock:
            found = self._tables["network"].first("name", name)
        return self._found("network", name, found)

    def get_network_by_name_or_id(self, id: str) -> Network:
        try:
            return self.get_network(id)
        except NotFoundError:
            return self.get_network_by_name(id)

    def get_networks(self) -> List[Network]:
        return self._all("network")

    def get_networks_by_ids(self, ids: Collection[str]) -> List[Network]:
        """Return the networks whose id is in ``ids``."""
        return [netw for netw in self._all("network") if netw.id in ids]

    def save_network(self, network: Network) -> None:
        """Store or update a network; a new one gets an id and creation time."""
        if not network.id:
            network.id = generate_random_id()
            network.short_id = truncate_id(network.id)
            network.created = datetime.now()
        self._save("network", network)

    def delete_network(self, network: Network) -> None:
        self._delete("network", network)

    # images

    def get_image(self, id: str) -> Image:
        with self._lock:
            table = self._tables["image"]
            found = table.first("short_id" if is_short_id(id) else "id", id)
        return self._found("image", id, found)

    def get_image_by_name(self, name: str) -> Image:
        with self._lock:
            found = self._tables["image"].first("name", name)
        return self._found("image", name, found)

    def get_image_by_name_or_id(self, id: str) -> Image:
        try:
            return self.get_image(id)
        except NotFoundError:
            return self.get_image_by_name(id)

    def get_images(self) -> List[Image]:
        return self._all("image")

    def save_image(self, image: Image) -> None:
        """Store or update an image; a new one gets an id and creation time."""
        if not image.id:
            image.id = generate_random_id()
            image.short_id = truncate_id(image.id)
            image.created = datetime.now()
        self._save("image", image)

    def delete_image(self, image: Image) -> None:
        self._delete("image", image)

    # generic

    @staticmethod
    def _found(kind: str, key: str, record: Optional[Any]) -> Any:
        if record is None:
            raise NotFoundError(f"{kind} {key} not found")
        return record

    def _all(self, table: str) -> list:
        with self._lock:
            return self._tables[table].all()

    def _save(self, table: str, record: Any) -> None:
        with self._lock:
            self._tables[table].insert(record)

    def _delete(self, table: str, record: Any) -> None:
        with self._lock:
            self._tables[table].delete(record)


_instance: Optional[Database] = None
_instance_lock = threading.Lock()


def get_database() -> Database:
    """Return the shared Database instance, creating it on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = Database()
        return _instance