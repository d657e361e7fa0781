import pytest

from kubedock.model.database import Database, NotFoundError, get_database
from kubedock.model.types import Container, Exec, Image, Network


@pytest.fixture
def db():
    return Database()


def test_singleton():
    first = get_database()
    assert get_database() is first
    assert get_database() is first


def test_container_lifecycle(db):
    with pytest.raises(NotFoundError):
        db.get_container("someid")
    con = Container()
    db.save_container(con)
    assert con.id != "" and len(con.id) == 64
    assert con.short_id == con.id[:12]
    assert con.created is not None

    con.image = "busybox"
    con.name = "testymctestface"
    db.save_container(con)

    loaded = db.get_container(con.id)
    assert (loaded.id, loaded.image) == (con.id, "busybox")
    loaded = db.get_container(con.short_id)
    assert (loaded.id, loaded.image) == (con.id, "busybox")
    loaded = db.get_container_by_name_or_id(con.name)
    assert (loaded.id, loaded.image) == (con.id, "busybox")
    assert db.get_container("testymctestface").id == con.id
    assert len(db.get_containers()) == 1

    conid = con.id
    db.delete_container(con)
    with pytest.raises(NotFoundError):
        db.get_container(conid)
    assert db.get_containers() == []


def test_container_not_found_message(db):
    with pytest.raises(NotFoundError, match="container missing not found"):
        db.get_container_by_name("missing")


def test_exec_lifecycle(db):
    with pytest.raises(NotFoundError):
        db.get_exec("someid")
    exc = Exec()
    db.save_exec(exc)
    assert exc.id != ""
    exc.container_id = "1234"
    db.save_exec(exc)
    loaded = db.get_exec(exc.id)
    assert (loaded.id, loaded.container_id) == (exc.id, "1234")
    assert len(db.get_execs()) == 1
    excid = exc.id
    db.delete_exec(exc)
    with pytest.raises(NotFoundError):
        db.get_exec(excid)


def test_delete_missing_raises(db):
    with pytest.raises(NotFoundError):
        db.delete_exec(Exec(id="nope"))


def test_repeated_save_delete(db):
    for _ in range(1000):
        con = Container()
        db.save_container(con)
        db.delete_container(con)
        netw = Network(name="tb303")
        db.save_network(netw)
        db.delete_network(netw)
    assert db.get_containers() == []
    assert len(db.get_networks()) == 3


def test_networks(db):
    assert db.get_network_by_name_or_id("bridge").name == "bridge"
    db.save_network(Network(name="net0"))
    for i, name in enumerate(["net1", "net2", "net3"], start=1):
        db.save_network(Network(name=name, id=str(i), short_id=str(i)))
    assert len(db.get_networks()) == 7

    net1 = db.get_network_by_name_or_id("net1")
    assert net1.id == "1"
    net1 = db.get_network_by_name_or_id("1")
    assert net1.name == "net1"
    db.delete_network(net1)
    with pytest.raises(NotFoundError):
        db.get_network_by_name_or_id("net1")

    assert db.get_networks_by_ids({}) == []
    found = db.get_networks_by_ids({"2": 1, "3": 1})
    assert sorted(n.name for n in found) == ["net2", "net3"]


def test_network_requires_name(db):
    with pytest.raises(ValueError):
        db.save_network(Network())


def test_images(db):
    with pytest.raises(NotFoundError):
        db.get_image_by_name_or_id("roland/tb303:latest")
    db.save_image(Image(name="roland/tr606:8.0.8"))
    names = ["roland/tr606:9.0.9", "roland/tr808:9.0.9", "roland/tr606:3.0.3"]
    for i, name in enumerate(names, start=1):
        db.save_image(Image(name=name, id=str(i), short_id=str(i)))
    assert len(db.get_images()) == 4

    img1 = db.get_image_by_name_or_id("roland/tr606:9.0.9")
    assert img1.id == "1"
    img1 = db.get_image_by_name_or_id("1")
    assert img1.name == "roland/tr606:9.0.9"
    db.delete_image(img1)
    with pytest.raises(NotFoundError):
        db.get_image_by_name_or_id("roland/tr606:9.0.9")
    assert len(db.get_images()) == 3