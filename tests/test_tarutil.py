import io
import tarfile

import pytest

from kubedock.util.tarutil import (
    get_target_file_names,
    get_target_folder_names,
    is_single_file_archive,
    pack_folder,
    unpack_file,
)


def _tar(*entries):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as archive:
        for name, data in entries:
            info = tarfile.TarInfo(name)
            if data is None:
                info.type = tarfile.DIRTYPE
                archive.addfile(info)
            else:
                info.size = len(data)
                archive.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def packed(tmp_path):
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "alpha.txt").write_bytes(b"alpha")
    (src / "sub" / "beta.txt").write_bytes(b"beta")
    out = io.BytesIO()
    pack_folder(str(src), out)
    return out.getvalue()


def test_pack_folder_file_names(packed):
    assert sorted(get_target_file_names("/dst", packed)) == [
        "/dst/alpha.txt",
        "/dst/sub/beta.txt",
    ]


def test_pack_folder_folder_names(packed):
    assert sorted(get_target_folder_names("/dst", packed)) == ["/dst", "/dst/sub"]


def test_pack_folder_round_trip_contents(packed):
    assert unpack_file("/dst", "/dst/sub/beta.txt", packed) == b"beta"
    assert unpack_file("/dst", "/dst/alpha.txt", io.BytesIO(packed)) == b"alpha"


def test_unpack_missing_file_raises():
    data = _tar(("a.txt", b"content"))
    with pytest.raises(FileNotFoundError):
        unpack_file("/dst", "/dst/b.txt", data)


def test_unpack_from_empty_archive_raises():
    with pytest.raises(FileNotFoundError):
        unpack_file("/dst", "/dst/a.txt", b"")


def test_empty_archive_has_no_targets():
    assert get_target_file_names("/dst", b"") == []
    assert get_target_folder_names("/dst", b"") == []


def test_relative_destination():
    data = _tar(("a.txt", b"content"))
    assert get_target_file_names("", data) == ["a.txt"]


def test_target_paths_are_normalised():
    data = _tar(("./x/../y.txt", b"content"))
    assert get_target_file_names("/d", data) == ["/d/y.txt"]


def test_folders_and_files_are_separated():
    data = _tar(("dir", None), ("dir/f.txt", b"x"))
    assert get_target_folder_names("/t", data) == ["/t/dir"]
    assert get_target_file_names("/t", data) == ["/t/dir/f.txt"]


def test_invalid_archive_raises():
    with pytest.raises(tarfile.TarError):
        get_target_file_names("/dst", b"x" * 1024)


@pytest.mark.parametrize(
    "data, expected",
    [
        (_tar(("a.txt", b"a")), True),
        (_tar(("dir", None), ("dir/a.txt", b"a")), True),
        (_tar(("a.txt", b"a"), ("b.txt", b"b")), False),
        (_tar(("dir", None)), False),
        (b"", False),
        (b"x" * 1024, False),
    ],
)
def test_is_single_file_archive(data, expected):
    assert is_single_file_archive(data) is expected