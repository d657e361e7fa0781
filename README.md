# kubedock

kubedock holds the state and the helpers needed to answer a container
engine API while the actual workloads run as pods on a Kubernetes cluster.
It keeps an in-memory record of containers, execs, networks and images,
turns container labels into Kubernetes settings, builds the JSON that the
container and network endpoints return, filters container lists, frames
log output the way attach clients expect it, and cleans up resources that
have been left behind.

## What is inside

- `kubedock.model.types` – `Container`, `Exec`, `Image` and `Network`
  records. A `Container` knows its environment variables
  (`get_env_vars`), pull policy (`get_image_pull_policy`), resource
  requests and limits (`get_resource_requirements`), the user it runs as
  (`get_run_as_user`), whether it should run as a job (`run_as_job`), its
  TCP ports, service ports, volumes, pre-archived files and networks.
  `Network.is_predefined()` is true for `bridge`, `null` and `host`.
- `kubedock.model.quantity` – `parse_quantity` reads Kubernetes resource
  quantities such as `500m`, `2000Mi` or `1000000000n` into a `Quantity`,
  whose `str()` is the canonical form (`parse_quantity("2000m")` prints
  as `2`). Invalid text raises `ValueError`.
- `kubedock.model.database` – `get_database()` returns the shared
  in-memory `Database`, preloaded with the `null`, `host` and `bridge`
  networks. Saving a record without an id assigns one and a creation
  time. Missing records raise `NotFoundError`.
- `kubedock.reaper` – `Reaper(db, backend, keep_max, exec_reap_max)`
  removes execs older than `exec_reap_max` (five minutes by default) and
  containers older than `keep_max`; `clean()` runs every cleaner once,
  `start()` runs it every `interval` seconds (60 by default) in a
  background thread until `stop()`. The backend is any object with
  `delete_container(container)` and `delete_older_than(age)`.
- `kubedock.server.filters` – `Filter` parses the `filters` query
  argument in both the current (`{"label": {"k=v": true}}`) and the
  legacy (`{"label": ["k=v"]}`) JSON form and matches it against anything
  with a `match(typ, key, value)` method.
- `kubedock.server.requests` – request bodies (`ContainerCreateRequest`,
  `ContainerExecRequest`, `ExecStartRequest`, `NetworkCreateRequest`,
  `NetworkConnectRequest`, `NetworkDisconnectRequest` and their parts),
  built with `from_dict`, and `ApiError`, which carries an HTTP status
  and a message.
- `kubedock.server.containers` – `RouterConfig` and the functions that
  build container details: `get_container_info`, `list_containers`,
  `get_container_names`, `get_network_settings_ports`,
  `get_container_ports` and `add_network_aliases`.
- `kubedock.server.networks` – `NetworkService` lists, inspects,
  creates, deletes, connects, disconnects and prunes networks, raising
  `ApiError` with the status to report.
- `kubedock.util` – `stringid` for identifiers, `tarutil` for archives,
  `ioproxy` for multiplexed stdout/stderr frames, `md2text` for turning
  markdown into plain text, `reverseproxy` for a local TCP proxy and
  `portforward` for port-forward URLs and port specifications.

## Examples

Store and look up a container:

```python
from kubedock.model.database import get_database, NotFoundError
from kubedock.model.types import Container

db = get_database()
container = Container(name="web", image="nginx")
db.save_container(container)          # assigns an id and a creation time

assert db.get_container_by_name_or_id("web").id == container.id

try:
    db.get_container("does-not-exist")
except NotFoundError as exc:
    print(exc)
```

Filter and list containers the way a client asks for them:

```python
from kubedock.server.containers import RouterConfig, list_containers
from kubedock.server.filters import Filter

spec = '{"label": {"com.docker.compose.project=demo": true}}'
wanted = [c for c in db.get_containers() if Filter(spec).match(c)]
summaries = list_containers(db, RouterConfig(), spec)
```

Manage networks:

```python
from kubedock.server.networks import NetworkService
from kubedock.server.requests import ApiError

networks = NetworkService(db)
created = networks.create({"Name": "backend"})
networks.connect("backend", {"container": container.id})
try:
    networks.delete("bridge")
except ApiError as exc:
    print(exc.status, exc.message)   # 403 ...
```

Frame output for an attached client; complete lines are written at once,
the rest follows on `flush()` or shortly after:

```python
import io
from kubedock.util.ioproxy import IoProxy, StdType

out = io.BytesIO()
proxy = IoProxy(out, StdType.STDOUT)
proxy.write(b"hello\npartial")
proxy.flush()
```

Identifiers:

```python
from kubedock.util.stringid import generate_random_id, truncate_id, is_short_id

full = generate_random_id()
assert is_short_id(truncate_id(full))
```

Proxy a local port to a remote address for as long as it is needed
(`local_port=0` picks a free port, stored in `local_port` after start):

```python
from kubedock.util.reverseproxy import ReverseProxy

with ReverseProxy(local_port=30390, remote_ip="127.0.0.1", remote_port=8080, timeout=2.0):
    ...
```

## What it does not do

The package has no HTTP server and no command to start one: the
container and network operations are plain functions and methods that
return JSON-ready dictionaries or raise `ApiError`. It does not talk to a
Kubernetes cluster either. Starting pods, streaming logs, running execs
and forwarding ports are left to a backend supplied by the caller; the
reaper only calls the two backend methods named above, and
`kubedock.util.portforward` only builds the URL and port specification
for a forward. Records live in memory and are lost when the process ends.

## Requirements

Python 3.10 or later. The package uses the standard library only; the
tests use pytest (`pip install .[test]`).