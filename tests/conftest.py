import pytest


class FakeTerminal:
    """Scripted stand-in for RichTerminal: records frames, replays keys."""

    def __init__(self, keys=(), height=5, fail_draw=None, fail_read=None):
        self.keys = list(keys)
        self.height = height
        self.fail_draw = fail_draw
        self.fail_read = fail_read
        self.frames = []
        self.timeouts = []
        self.entered = False
        self.exited = False

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited = True
        return False

    def viewport_height(self):
        return self.height

    def draw(self, frame):
        if self.fail_draw is not None:
            raise self.fail_draw
        self.frames.append(frame)

    def next_key(self, timeout=None):
        self.timeouts.append(timeout)
        if self.fail_read is not None:
            raise self.fail_read
        if not self.keys:
            raise AssertionError("ran out of scripted keys")
        return self.keys.pop(0)


@pytest.fixture
def fake_terminal():
    return FakeTerminal


@pytest.fixture
def write_tree(tmp_path):
    """Create files from a {relative_path: str | bytes} mapping under tmp_path."""
    def _write(files):
        for rel, content in files.items():
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                p.write_bytes(content)
            else:
                p.write_text(content, encoding="utf-8")
        return tmp_path
    return _write
