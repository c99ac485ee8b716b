from __future__ import annotations

from pathlib import Path

import pytest

from dws_toolbox.errors import PathError, PathNotFoundError, SandboxViolationError
from dws_toolbox.services import Sandbox


def test_create_with_empty_value_disables_sandbox() -> None:
    assert not Sandbox.create(None).enabled
    assert not Sandbox.create("  ").enabled


def test_create_makes_missing_root(tmp_path: Path) -> None:
    root = tmp_path / "nested" / "jail"
    sandbox = Sandbox.create(root)
    assert root.is_dir()
    assert sandbox.root == root.resolve()


def test_create_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x")
    with pytest.raises(PathError):
        Sandbox.create(target)


@pytest.mark.parametrize(
    "escape",
    ["../outside.pdf", "../../etc/passwd", "docs/../../secret.pdf", "a/b/../../../x"],
)
def test_relative_escape_is_rejected(sandbox: Sandbox, escape: str) -> None:
    with pytest.raises(SandboxViolationError, match="only access files within the sandbox"):
        sandbox.resolve_path(escape)
    with pytest.raises(SandboxViolationError):
        sandbox.resolve_write(escape)


def test_absolute_path_inside_root_is_not_prefixed_twice(
    sandbox: Sandbox, sandbox_root: Path
) -> None:
    target = sandbox_root / "docs" / "a.pdf"
    assert sandbox.resolve_path(str(target)) == target


def test_absolute_path_outside_root_is_mapped_into_root(
    sandbox: Sandbox, sandbox_root: Path
) -> None:
    assert sandbox.resolve_path("/etc/passwd") == sandbox_root / "etc" / "passwd"


def test_disabled_sandbox_requires_absolute_paths(tmp_path: Path) -> None:
    sandbox = Sandbox.disabled()
    with pytest.raises(PathError, match="Absolute paths are required"):
        sandbox.resolve_path("relative/file.pdf")

    absolute = tmp_path / "x" / ".." / "file.pdf"
    assert sandbox.resolve_path(str(absolute)) == tmp_path / "file.pdf"


def test_resolve_read_reports_missing_file_in_sandbox(
    sandbox: Sandbox, sandbox_root: Path
) -> None:
    with pytest.raises(PathNotFoundError, match="Path not found in sandbox: missing.pdf") as info:
        sandbox.resolve_read("missing.pdf")
    assert str(sandbox_root) in str(info.value)


def test_resolve_read_reports_missing_file_without_sandbox(tmp_path: Path) -> None:
    missing = tmp_path / "missing.pdf"
    with pytest.raises(PathNotFoundError, match="Path not found:"):
        Sandbox.disabled().resolve_read(str(missing))


def test_resolve_read_checks_kind(sandbox: Sandbox, sandbox_root: Path) -> None:
    (sandbox_root / "folder").mkdir()
    (sandbox_root / "doc.pdf").write_bytes(b"pdf")

    assert sandbox.resolve_read("doc.pdf") == sandbox_root / "doc.pdf"
    assert sandbox.resolve_read("folder", kind="directory") == sandbox_root / "folder"
    with pytest.raises(PathNotFoundError, match="not a file"):
        sandbox.resolve_read("folder")
    with pytest.raises(PathNotFoundError, match="not a directory"):
        sandbox.resolve_read("doc.pdf", kind="directory")


def test_resolve_write_does_not_leave_probe_directories(
    sandbox: Sandbox, sandbox_root: Path
) -> None:
    resolved = sandbox.resolve_write("new/deep/out.pdf")

    assert resolved == sandbox_root / "new" / "deep" / "out.pdf"
    assert not (sandbox_root / "new").exists()


def test_resolve_write_rejects_directory_target(sandbox: Sandbox, sandbox_root: Path) -> None:
    (sandbox_root / "out").mkdir()
    with pytest.raises(PathError, match="points to a directory"):
        sandbox.resolve_write("out")


def test_contains(sandbox: Sandbox, sandbox_root: Path, tmp_path: Path) -> None:
    assert sandbox.contains(sandbox_root / "a.pdf")
    assert not sandbox.contains(tmp_path / "elsewhere.pdf")
    assert Sandbox.disabled().contains(tmp_path)


def test_nul_byte_is_reported_with_the_path(sandbox: Sandbox) -> None:
    with pytest.raises(PathError, match="Invalid Path: 'a\\\\x00b.pdf'"):
        sandbox.resolve_path("a\x00b.pdf")
    with pytest.raises(PathError, match="NUL"):
        Sandbox.disabled().resolve_read("/tmp/a\x00b.pdf")
