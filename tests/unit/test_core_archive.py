"""Tests for tar packing/unpacking over plain file-like objects."""

import io
import tarfile

import pytest

from shincrypt.core.archive import copy_raw, pack, unpack
from shincrypt.core.exceptions import FormatError


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "photos"
    (root / "2024" / "empty").mkdir(parents=True)
    (root / "a.jpg").write_bytes(b"A" * 1000)
    (root / "2024" / "b.jpg").write_bytes(b"B" * 3000)
    return root


def test_pack_names_entries_under_top_level(tree):
    buf = io.BytesIO()
    pack(buf, tree, tree.name)
    buf.seek(0)
    with tarfile.open(fileobj=buf, mode="r:") as tar:
        names = set(tar.getnames())
    assert names == {"photos", "photos/a.jpg", "photos/2024", "photos/2024/b.jpg", "photos/2024/empty"}


def test_pack_unpack_reproduces_tree(tree, tmp_path):
    buf = io.BytesIO()
    pack(buf, tree, tree.name)
    buf.seek(0)

    out = tmp_path / "out"
    out.mkdir()
    unpack(buf, out)
    assert (out / "photos" / "a.jpg").read_bytes() == b"A" * 1000
    assert (out / "photos" / "2024" / "b.jpg").read_bytes() == b"B" * 3000
    assert (out / "photos" / "2024" / "empty").is_dir()


def test_pack_excludes_given_path(tree):
    inside = tree / "photos.shincrypt"
    inside.write_bytes(b"partial container")
    buf = io.BytesIO()
    pack(buf, tree, tree.name, exclude=inside)
    buf.seek(0)
    with tarfile.open(fileobj=buf, mode="r:") as tar:
        assert "photos/photos.shincrypt" not in tar.getnames()


def test_pack_does_not_close_sink(tree):
    buf = io.BytesIO()
    pack(buf, tree, tree.name)
    assert not buf.closed


def test_unpack_garbage_raises_format_error(tmp_path):
    with pytest.raises(FormatError):
        unpack(io.BytesIO(b"\x13" * 4096), tmp_path)


def test_unpack_rejects_path_traversal(tmp_path):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        info = tarfile.TarInfo("../escape.txt")
        info.size = 3
        tar.addfile(info, io.BytesIO(b"bad"))
    buf.seek(0)
    out = tmp_path / "out"
    out.mkdir()
    with pytest.raises(FormatError):
        unpack(buf, out)
    assert not (tmp_path / "escape.txt").exists()


def test_pack_stores_symlink_targets_as_regular_files(tree, tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_bytes(b"linked")
    try:
        (tree / "link.txt").symlink_to(outside.absolute())
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not available here")

    buf = io.BytesIO()
    pack(buf, tree, tree.name)
    buf.seek(0)
    with tarfile.open(fileobj=buf, mode="r:") as tar:
        member = tar.getmember("photos/link.txt")
        assert member.isfile()
        assert tar.extractfile(member).read() == b"linked"


def test_unpack_rejects_absolute_link_entries(tmp_path):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        info = tarfile.TarInfo("link.txt")
        info.type = tarfile.SYMTYPE
        info.linkname = "/etc/passwd"
        tar.addfile(info)
    buf.seek(0)
    out = tmp_path / "out"
    out.mkdir()
    with pytest.raises(FormatError):
        unpack(buf, out)
    assert not (out / "link.txt").is_symlink()


def test_copy_raw():
    out = io.BytesIO()
    copy_raw(io.BytesIO(b"payload" * 10000), out)
    assert out.getvalue() == b"payload" * 10000
