import logging
from pathlib import Path

import pytest

from rsd.packager import PackageError, pack_project


def test_pack_project_keys_are_relative(tmp_path: Path) -> None:
    root = tmp_path / "dest"
    (root / "forms").mkdir(parents=True)
    (root / "widget.js").write_text("var a = 1;\n", encoding="utf-8")
    (root / "forms" / "order.js").write_text("var b = 'ü';", encoding="utf-8")
    (root / "notes.txt").write_text("", encoding="utf-8")

    package = pack_project(root)

    assert package == {
        "widget.js": "var a = 1;\n",
        "forms/order.js": "var b = 'ü';",
        "notes.txt": "",
    }


def test_pack_project_matches_disk_content(tmp_path: Path) -> None:
    root = tmp_path / "dest"
    (root / "a" / "b").mkdir(parents=True)
    files = {"x.js": "1", "a/y.js": "line1\r\nline2", "a/b/z.js": "{\"k\": true}"}
    for rel, text in files.items():
        (root / rel).write_bytes(text.encode("utf-8"))

    package = pack_project(root)

    for rel in files:
        assert package[rel].encode("utf-8") == (root / rel).read_bytes()


def test_pack_project_empty_dir(tmp_path: Path) -> None:
    assert pack_project(tmp_path) == {}


def test_pack_project_missing_root(tmp_path: Path) -> None:
    with pytest.raises(PackageError):
        pack_project(tmp_path / "dest")


def test_pack_project_warns_on_invalid_utf8(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / "blob.bin").write_bytes(b"ok\xff")
    (tmp_path / "text.js").write_text("var s = '\ufffd';", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="rsd.packager"):
        package = pack_project(tmp_path)

    assert package["blob.bin"] == "ok\ufffd"
    assert package["text.js"] == "var s = '\ufffd';"
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings == ["blob.bin is not valid UTF-8; undecodable bytes were replaced"]
