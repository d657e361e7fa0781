import io
import tarfile
import threading

import pytest

from kubedock.model.types import (
    Container,
    EnvVar,
    Network,
    PreArchive,
    PullPolicy,
)


def test_get_env_vars():
    c = Container(env=["rc738", "rc743=Penguin Adventure", "rc768=Space Manbow"])
    assert c.get_env_vars() == [
        EnvVar("rc743", "Penguin Adventure"),
        EnvVar("rc768", "Space Manbow"),
    ]


def _reqlim(req):
    out = {}
    if "cpu" in req.requests:
        out["reqcpu"] = str(req.requests["cpu"])
    if "memory" in req.requests:
        out["reqmem"] = str(req.requests["memory"])
    if "cpu" in req.limits:
        out["limcpu"] = str(req.limits["cpu"])
    if "memory" in req.limits:
        out["limmem"] = str(req.limits["memory"])
    return out


CPU = "com.joyrex2001.kubedock.request-cpu"
MEM = "com.joyrex2001.kubedock.request-memory"


@pytest.mark.parametrize(
    "labels,expected",
    [
        ({}, {}),
        ({CPU: "500m"}, {"reqcpu": "500m"}),
        ({CPU: "500m,2000m"}, {"reqcpu": "500m", "limcpu": "2"}),
        ({CPU: ",2000m"}, {"reqcpu": "2", "limcpu": "2"}),
        ({MEM: "500Mi"}, {"reqmem": "500Mi"}),
        ({MEM: "500Mi,2000Mi"}, {"reqmem": "500Mi", "limmem": "2000Mi"}),
        ({MEM: ",2000Mi"}, {"reqmem": "2000Mi", "limmem": "2000Mi"}),
        ({MEM: " , 2000Mi"}, {"reqmem": "2000Mi", "limmem": "2000Mi"}),
        ({CPU: ",1000000000n"}, {"reqcpu": "1", "limcpu": "1"}),
        ({MEM: "209715200"}, {"reqmem": "209715200"}),
    ],
)
def test_get_resource_requirements(labels, expected):
    assert _reqlim(Container(labels=labels).get_resource_requirements()) == expected


@pytest.mark.parametrize(
    "labels",
    [
        {CPU: "joyrex"},
        {MEM: "joyrex"},
        {MEM: "500Mi,2000Mi,2500Mi"},
        {MEM: "500Mi,joyrex"},
    ],
)
def test_get_resource_requirements_invalid(labels):
    with pytest.raises(ValueError):
        Container(labels=labels).get_resource_requirements()


def test_get_image_pull_policy():
    assert Container().get_image_pull_policy() is PullPolicy.IF_NOT_PRESENT
    c = Container(labels={"com.joyrex2001.kubedock.pull-policy": "always"})
    assert c.get_image_pull_policy() is PullPolicy.ALWAYS
    c = Container(labels={"com.joyrex2001.kubedock.pull-policy": "something"})
    with pytest.raises(ValueError):
        c.get_image_pull_policy()


@pytest.mark.parametrize("user,expected", [("", None), ("1000", 1000), ("0", 0)])
def test_get_run_as_user(user, expected):
    assert Container(user=user).get_run_as_user() == expected


@pytest.mark.parametrize("user", ["9999999999999999999999999999999", "abc"])
def test_get_run_as_user_invalid(user):
    with pytest.raises(ValueError):
        Container(user=user).get_run_as_user()


def test_map_port():
    c = Container()
    assert c.mapped_ports == {}
    c.map_port(808, 1808)
    c.map_port(909, 1909)
    assert c.mapped_ports == {808: 1808, 909: 1909}


@pytest.mark.parametrize(
    "value,expected",
    [(None, False), ("false", False), ("true", True), ("bogus", False), ("1", True)],
)
def test_run_as_job(value, expected):
    labels = {} if value is None else {"com.joyrex2001.kubedock.deploy-as-job": value}
    assert Container(labels=labels).run_as_job() is expected


def test_get_tcp_ports():
    ports = {"sh101": 0, "303/tcp": 0, "606/udp": 0, "tr808/tcp": 0, "909/tcp": 0}
    c = Container(exposed_ports=dict(ports), image_ports=dict(ports))
    assert sorted(c.get_container_tcp_ports()) == [303, 909]
    assert sorted(c.get_image_tcp_ports()) == [303, 909]
    assert Container().get_container_tcp_ports() == []
    assert Container().get_image_tcp_ports() == []


@pytest.mark.parametrize(
    "src,dst,expected",
    [
        ("303", "606/tcp", {303: 606}),
        ("", "606/tcp", {-606: 606}),
        ("303", "606", {303: 606}),
    ],
)
def test_add_host_port(src, dst, expected):
    c = Container()
    c.add_host_port(src, dst)
    assert c.host_ports == expected


def test_add_host_port_invalid():
    c = Container()
    with pytest.raises(ValueError):
        c.add_host_port("three-o-three", "606/tcp")
    assert c.host_ports == {}


@pytest.mark.parametrize(
    "container,expected",
    [
        (
            Container(
                exposed_ports={"303/tcp": 0, "909/tcp": 0},
                image_ports={"606/tcp": 0},
                host_ports={202: 202},
            ),
            {202: 202, 303: 303, 606: 606, 909: 909},
        ),
        (
            Container(
                exposed_ports={"303/tcp": 0, "909/tcp": 0},
                image_ports={"303/tcp": 0},
                host_ports={-202: 202},
            ),
            {202: 202, 303: 303, 909: 909},
        ),
        (
            Container(
                exposed_ports={"303/tcp": 0, "909/tcp": 0},
                image_ports={"303/tcp": 0},
                host_ports={-202: 202},
                mapped_ports={606: 808},
            ),
            {202: 202, 303: 303, 606: 808, 909: 909},
        ),
    ],
)
def test_get_service_ports(container, expected):
    assert container.get_service_ports() == expected


def test_stop():
    c = Container()
    event = threading.Event()
    c.add_stop_channel(event)
    c.signal_stop()
    assert event.wait(1)
    assert c.stop_channels == []


def test_detach():
    c = Container()
    event = threading.Event()
    c.add_attach_channel(event)
    c.signal_detach()
    assert event.wait(1)
    assert c.attach_channels == []


def test_volumes(tmp_path):
    f = tmp_path / "container_test.go"
    f.write_text("data")
    d = tmp_path / "types"
    d.mkdir()
    c = Container(binds=[f"{f}:/tmp/container_test.go:ro", f"{d}:/tmp/types:ro"])
    assert c.get_volumes() == {"/tmp/container_test.go": str(f), "/tmp/types": str(d)}
    assert c.get_volume_files() == {"/tmp/container_test.go": str(f)}
    assert c.get_volume_folders() == {"/tmp/types": str(d)}
    assert c.has_volumes() is True

    empty = Container(binds=[])
    assert empty.get_volumes() == {}
    assert empty.get_volume_files() == {}
    assert empty.get_volume_folders() == {}
    assert empty.has_volumes() is False


def _tar(files):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def test_get_pre_archive_files():
    c = Container(
        pre_archives=[
            PreArchive("/etc", _tar({"app.conf": b"hello"})),
            PreArchive("/opt", _tar({"a": b"1", "b": b"2"})),
        ]
    )
    assert c.get_pre_archive_files() == {"/etc/app.conf": b"hello"}


def test_connect_network():
    c = Container()
    c.connect_network("1234")
    assert "1234" in c.networks
    c.disconnect_network("1234")
    assert "1234" not in c.networks
    with pytest.raises(ValueError):
        c.disconnect_network("1234")
    with pytest.raises(ValueError):
        c.disconnect_network("bridge")


@pytest.mark.parametrize(
    "name,labels,typ,key,val,expected",
    [
        ("", {}, "label", "some", "thing", False),
        ("", {"some": "thing"}, "label", "some", "thing", True),
        ("", {"some": "what"}, "label", "some", "thing", False),
        ("", {"some": "what"}, "magic", "some", "thing", True),
        ("", {"some": "what"}, "name", "something", "", False),
        ("testymctestface", {"some": "what"}, "name", "testymctestface", "", True),
    ],
)
def test_match(name, labels, typ, key, val, expected):
    assert Container(name=name, labels=labels).match(typ, key, val) is expected


def test_state_and_status():
    assert Container().state_string() == "Created"
    assert Container().status_string() == "unhealthy"
    assert Container(running=True).state_string() == "Up"
    assert Container(running=True).status_string() == "healthy"
    assert Container(killed=True).state_string() == "Dead"
    assert Container(completed=True).state_string() == "Exited"


def test_network_is_predefined():
    assert Network(name="bridge").is_predefined() is True
    assert Network(name="host").is_predefined() is True
    assert Network(name="null").is_predefined() is True
    assert Network(name="tb303").is_predefined() is False