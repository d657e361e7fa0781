"""Periodic removal of lingering containers and execs."""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional, Protocol

from kubedock.model.database import Database, get_database
from kubedock.model.types import Container

log = logging.getLogger(__name__)

DEFAULT_EXEC_REAP_MAX = timedelta(minutes=5)
KUBERNETES_GRACE = timedelta(minutes=15)


class Backend(Protocol):
    """The cluster operations the reaper relies on."""

    def delete_container(self, container: Container) -> None:
        ...

    def delete_older_than(self, age: timedelta) -> None:
        ...


def _is_older(created: Optional[datetime], age: timedelta) -> bool:
    return created is None or created < datetime.now() - age


class Reaper:
    """Removes resources older than their maximum age at a steady interval."""

    def __init__(
        self,
        db: Optional[Database] = None,
        backend: Optional[Backend] = None,
        keep_max: timedelta = timedelta(0),
        exec_reap_max: timedelta = DEFAULT_EXEC_REAP_MAX,
    ) -> None:
        self.db = db if db is not None else get_database()
        self.backend = backend
        self.keep_max = keep_max
        self.exec_reap_max = exec_reap_max
        self.interval = 60.0
        self._quit = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def clean_containers(self) -> None:
        """Delete locally known containers older than ``keep_max``."""
        for container in self.db.get_containers():
            if not _is_older(container.created, self.keep_max):
                continue
            log.debug("deleting container: %s", container.id)
            if self.backend is not None:
                try:
                    self.backend.delete_container(container)
                except Exception as exc:
                    # The cluster sweep will pick it up anyway.
                    log.warning("error deleting deployment: %s", exc)
            self.db.delete_container(container)

    def clean_containers_kubernetes(self) -> None:
        """Delete cluster resources not known locally that are too old."""
        if self.backend is not None:
            self.backend.delete_older_than(self.keep_max + KUBERNETES_GRACE)

    def clean_execs(self) -> None:
        """Delete execs older than ``exec_reap_max``."""
        for exc in self.db.get_execs():
            if _is_older(exc.created, self.exec_reap_max):
                log.debug("deleting exec: %s", exc.id)
                self.db.delete_exec(exc)

    def clean(self) -> None:
        """Run every cleaner, logging rather than raising their errors."""
        cleaners = (
            ("execs", self.clean_execs),
            ("containers", self.clean_containers),
            ("k8s containers", self.clean_containers_kubernetes),
        )
        for what, cleaner in cleaners:
            try:
                cleaner()
            except Exception as exc:
                log.error("error cleaning %s: %s", what, exc)

    def start(self) -> None:
        """Start cleaning in a background thread every ``interval`` seconds."""
        if self._thread is not None:
            raise RuntimeError("reaper already started")
        self._quit.clear()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the background thread."""
        self._quit.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        while not self._quit.wait(self.interval):
            log.info("start cleaning lingering objects...")
            self.clean()
            log.info("finished cleaning lingering objects...")