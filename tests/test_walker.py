import os
import sys

import pytest

from rstr import SearchOptions, walk_files


def _rel(root, paths):
    return [os.path.relpath(p, root).replace(os.sep, "/") for p in paths]


def _symlink(target, link, **kwargs):
    try:
        os.symlink(target, link, **kwargs)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported here")


def test_visits_every_file_once_in_order(write_tree):
    root = write_tree({
        "b.txt": "b",
        "a.txt": "a",
        "sub/c.txt": "c",
        "a_dir/d.txt": "d",
        "a_dir/deeper/e.txt": "e",
    })
    paths = list(walk_files(str(root)))
    assert _rel(root, paths) == ["a.txt", "b.txt", "a_dir/d.txt", "a_dir/deeper/e.txt", "sub/c.txt"]
    assert len(paths) == len(set(paths))


def test_walk_is_lazy_and_restartable(write_tree):
    root = write_tree({"a.txt": "a", "b.txt": "b"})
    gen = walk_files(str(root))
    assert not isinstance(gen, list)
    first = next(gen)
    assert first.endswith("a.txt")
    assert list(walk_files(str(root))) == list(walk_files(str(root)))


def test_empty_directory(tmp_path):
    assert list(walk_files(str(tmp_path))) == []


def test_symlink_cycle_terminates(write_tree):
    root = write_tree({"sub/inner.txt": "x", "top.txt": "y"})
    _symlink(str(root), str(root / "sub" / "loop"), target_is_directory=True)
    paths = _rel(root, walk_files(str(root)))
    assert paths == ["top.txt", "sub/inner.txt"]


def test_symlinked_files_are_not_yielded(write_tree):
    root = write_tree({"real.txt": "x"})
    _symlink(str(root / "real.txt"), str(root / "alias.txt"))
    assert _rel(root, walk_files(str(root))) == ["real.txt"]


def test_skip_hidden(write_tree):
    root = write_tree({".env": "x", ".git/config": "x", "visible.txt": "x"})
    assert _rel(root, walk_files(str(root))) == [".env", "visible.txt", ".git/config"]
    assert _rel(root, walk_files(str(root), SearchOptions(skip_hidden=True))) == ["visible.txt"]


def test_respect_gitignore(write_tree):
    root = write_tree({
        ".gitignore": "*.log\nbuild/\n",
        "app.py": "x",
        "debug.log": "x",
        "build/out.txt": "x",
        "src/main.py": "x",
    })
    paths = _rel(root, walk_files(str(root), SearchOptions(respect_gitignore=True)))
    assert paths == [".gitignore", "app.py", "src/main.py"]


def test_include_and_exclude_globs(write_tree):
    root = write_tree({
        "a.py": "x",
        "b.txt": "x",
        "vendor/c.py": "x",
        "src/d.py": "x",
        "src/test_d.py": "x",
    })
    opts = SearchOptions(include_globs=("*.py",), exclude_globs=("vendor", "test_*"))
    assert _rel(root, walk_files(str(root), opts)) == ["a.py", "src/d.py"]


def test_max_mb_skips_large_files(write_tree):
    root = write_tree({"small.txt": "x", "big.txt": "x" * (1024 * 1024 + 1)})
    assert _rel(root, walk_files(str(root), SearchOptions(max_mb=1))) == ["small.txt"]


def test_depth_limit(write_tree):
    root = write_tree({"a.txt": "x", "one/b.txt": "x", "one/two/c.txt": "x"})
    assert _rel(root, walk_files(str(root), SearchOptions(depth_limit=0))) == ["a.txt"]
    assert _rel(root, walk_files(str(root), SearchOptions(depth_limit=1))) == ["a.txt", "one/b.txt"]


@pytest.mark.skipif(sys.platform.startswith("win") or os.geteuid() == 0,
                    reason="permission bits are not enforced")
def test_unreadable_directory_is_skipped(write_tree):
    root = write_tree({"ok.txt": "x", "locked/secret.txt": "x"})
    locked = root / "locked"
    locked.chmod(0)
    try:
        assert _rel(root, walk_files(str(root))) == ["ok.txt"]
    finally:
        locked.chmod(0o755)
