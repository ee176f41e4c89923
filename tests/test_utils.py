import re

import pytest

from rstr import fmt_size, is_binary_quick, load_gitignore_rules, gitignore_ignored, compile_pattern


def test_fmt_size():
    assert fmt_size(500) == "500 B"
    assert "KB" in fmt_size(2048)
    assert fmt_size(3 * 1024 * 1024) == "3.0 MB"
    assert fmt_size(1023) == "1023 B"
    assert fmt_size(1024) == "1.0 KB"


def test_is_binary_quick(tmp_path):
    p = tmp_path / "text.txt"
    p.write_text("hello world", encoding="utf-8")
    assert not is_binary_quick(str(p))
    b = tmp_path / "bin.dat"
    b.write_bytes(b"\x00\x01\x02")
    assert is_binary_quick(str(b))


def test_is_binary_quick_missing_file(tmp_path):
    assert is_binary_quick(str(tmp_path / "nope.txt"))


def test_gitignore_rules(tmp_path):
    gi = tmp_path / ".gitignore"
    gi.write_text("# build output\nnode_modules/\n!important.log\n*.log\n\n/dist\n")
    rules = load_gitignore_rules(str(tmp_path))
    assert ("node_modules", False, True) in rules
    assert ("important.log", True, False) in rules
    assert ("dist", False, False) in rules
    assert len(rules) == 4


def test_gitignore_missing_file(tmp_path):
    assert load_gitignore_rules(str(tmp_path)) == []


def test_gitignore_ignored(tmp_path):
    gi = tmp_path / ".gitignore"
    gi.write_text("*.log\nbuild/\n!keep.log\ndocs/*.tmp\n")
    rules = load_gitignore_rules(str(tmp_path))
    assert gitignore_ignored("error.log", False, rules)
    assert gitignore_ignored("sub/error.log", False, rules)
    assert not gitignore_ignored("keep.log", False, rules)
    assert not gitignore_ignored("README.md", False, rules)
    assert gitignore_ignored("build", True, rules)
    assert not gitignore_ignored("build", False, rules)
    assert gitignore_ignored("docs/a.tmp", False, rules)
    assert not gitignore_ignored("a.tmp", False, rules)


def test_compile_pattern_case():
    assert compile_pattern("todo").search("TODO") is None
    assert compile_pattern("todo", ignore_case=True).search("TODO") is not None


def test_compile_pattern_invalid():
    with pytest.raises(re.error):
        compile_pattern("(unbalanced")
