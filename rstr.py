"""
rstr: a regex search tool for folders, browsed in the terminal.

Scans every file under a directory, collects the lines matching a regular
expression and shows them in a scrollable full-screen list. Run it as
`python rstr.py PATH PATTERN` (or `rstr PATH PATTERN` once installed).
"""

import os
import sys
import re
import fnmatch
import time
import threading
import logging
import stat
import select
import argparse
import codecs
from dataclasses import dataclass, field
from enum import Enum

from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

__all__ = [
    "main",
    "__version__",
    "SearchOptions",
    "SearchRequest",
    "Match",
    "ResultStore",
    "NavigationState",
    "ScanWorker",
    "ResultBrowser",
    "RichTerminal",
    "walk_files",
    "scan_file",
    "search",
]
__version__ = "2026.1.0"

logger = logging.getLogger("rstr")
logger.setLevel(logging.INFO)
logger.propagate = False
logger.addHandler(logging.NullHandler())

BINARY_SNIFF_BYTES = 2048
SCAN_REFRESH_SECONDS = 0.05
WORKER_JOIN_SECONDS = 2.0
# header panel + footer panel + the list panel's own border
CHROME_ROWS = 3 + 3 + 2


class TerminalError(RuntimeError):
    """The terminal could not be set up, drawn to, or read from."""


# ---------- Utilities ----------
def fmt_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes} B"
    size = num_bytes / 1024.0
    for unit in ["KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


def is_binary_quick(path: str) -> bool:
    try:
        with open(path, "rb") as fb:
            chunk = fb.read(BINARY_SNIFF_BYTES)
            return b"\x00" in chunk
    except OSError:
        return True  # treat unreadable as binary/skip


def is_hidden_path(path: str) -> bool:
    name = os.path.basename(path.rstrip("\\/"))
    if name.startswith("."):
        return True
    if sys.platform.startswith("win"):
        try:
            attrs = os.stat(path).st_file_attributes
            return bool(attrs & (stat.FILE_ATTRIBUTE_HIDDEN | stat.FILE_ATTRIBUTE_SYSTEM))
        except OSError:
            return False
    return False


def load_gitignore_rules(base_dir: str) -> list[tuple[str, bool, bool]]:
    """
    Very small subset of .gitignore:
    - blank lines and # comments ignored
    - !negation supported
    - patterns with / are matched against the relative posix path
    - patterns without / are matched against the basename
    - patterns ending with / only apply to directories
    """
    rules: list[tuple[str, bool, bool]] = []
    path = os.path.join(base_dir, ".gitignore")
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith("#"):
                    continue
                negated = line.startswith("!")
                if negated:
                    line = line[1:].strip()
                    if not line:
                        continue
                dir_only = line.endswith("/")
                pat = line.rstrip("/").lstrip("/")
                if not pat:
                    continue
                rules.append((pat, negated, dir_only))
    except OSError:
        return []
    return rules


def gitignore_ignored(rel_posix_path: str, is_dir: bool, rules: list[tuple[str, bool, bool]]) -> bool:
    if not rules:
        return False
    ignored = False
    name = rel_posix_path.rsplit("/", 1)[-1]
    for pat, negated, dir_only in rules:
        if dir_only and not is_dir:
            continue
        target = rel_posix_path if ("/" in pat) else name
        if fnmatch.fnmatchcase(target, pat):
            ignored = not negated
    return ignored


def compile_pattern(pattern: str, *, ignore_case: bool = False) -> re.Pattern:
    """Compile the user's pattern; raises re.error when it is not a valid regex."""
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(pattern, flags)


# ---------- Data model ----------
@dataclass(frozen=True)
class SearchOptions:
    ignore_case: bool = False
    include_globs: tuple[str, ...] = ()
    exclude_globs: tuple[str, ...] = ()
    max_mb: float = 0.0
    depth_limit: int | None = None
    skip_hidden: bool = False
    respect_gitignore: bool = False
    encoding: str = "utf-8"


@dataclass(frozen=True)
class SearchRequest:
    root_path: str
    pattern: re.Pattern
    options: SearchOptions = field(default_factory=SearchOptions)

    @classmethod
    def build(cls, root_path: str, pattern: str, options: SearchOptions | None = None) -> "SearchRequest":
        options = options or SearchOptions()
        return cls(root_path, compile_pattern(pattern, ignore_case=options.ignore_case), options)


@dataclass(frozen=True)
class Match:
    """
    One matching line. match_spans holds (start, end) str indices into
    line_text, so line_text[start:end] is the hit; they are code point
    offsets, not byte offsets, for non-ASCII text.
    """

    file_path: str
    line_number: int
    line_text: str
    match_spans: tuple[tuple[int, int], ...]


@dataclass
class ScanProgress:
    files_scanned: int = 0
    files_skipped: int = 0
    bytes_scanned: int = 0
    current_file: str = ""
    done: bool = False


class ResultStore:
    """Append-only list of matches shared by one scanning thread and the UI."""

    def __init__(self) -> None:
        self._matches: list[Match] = []
        self._lock = threading.Lock()

    def add(self, match: Match) -> None:
        with self._lock:
            self._matches.append(match)

    def get(self, index: int) -> Match:
        with self._lock:
            return self._matches[index]

    def window(self, start: int, count: int) -> list[Match]:
        with self._lock:
            return self._matches[start:start + count]

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)

    def __iter__(self):
        return iter(self.window(0, len(self)))


# ---------- Walker ----------
def walk_files(root_path: str, options: SearchOptions | None = None):
    """
    Yield regular files under root_path, lexicographically per directory, the
    files of a directory before its subdirectories. Symlinks are never followed
    or yielded, and directories that cannot be listed are skipped.
    """
    options = options or SearchOptions()
    gitignore_rules = load_gitignore_rules(root_path) if options.respect_gitignore else []
    base_depth = os.path.abspath(root_path).rstrip(os.sep).count(os.sep)
    max_bytes = options.max_mb * 1024 * 1024

    for root, dirs, files in os.walk(root_path, followlinks=False):
        dirs[:] = sorted(d for d in dirs if not os.path.islink(os.path.join(root, d)))
        files = sorted(files)

        if options.depth_limit is not None:
            cur_depth = os.path.abspath(root).rstrip(os.sep).count(os.sep) - base_depth
            if cur_depth >= options.depth_limit:
                dirs[:] = []

        if options.skip_hidden:
            dirs[:] = [d for d in dirs if not is_hidden_path(os.path.join(root, d))]
            files = [f for f in files if not is_hidden_path(os.path.join(root, f))]

        if gitignore_rules:
            dirs[:] = [d for d in dirs if not _ignored(root_path, root, d, True, gitignore_rules)]
            files = [f for f in files if not _ignored(root_path, root, f, False, gitignore_rules)]

        if options.exclude_globs:
            dirs[:] = [d for d in dirs if not any(fnmatch.fnmatch(d, g) for g in options.exclude_globs)]

        for fname in files:
            if options.include_globs and not any(fnmatch.fnmatch(fname, g) for g in options.include_globs):
                continue
            if options.exclude_globs and any(fnmatch.fnmatch(fname, g) for g in options.exclude_globs):
                continue

            fpath = os.path.join(root, fname)
            try:
                st = os.lstat(fpath)
            except OSError as e:
                logger.debug("Skipping %s: %s", fpath, e)
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            if max_bytes > 0 and st.st_size > max_bytes:
                logger.debug("Skipping %s: larger than %s MB", fpath, options.max_mb)
                continue
            yield fpath


def _ignored(base_dir: str, root: str, name: str, is_dir: bool, rules: list[tuple[str, bool, bool]]) -> bool:
    rel = os.path.relpath(os.path.join(root, name), base_dir).replace(os.sep, "/")
    return gitignore_ignored(rel, is_dir=is_dir, rules=rules)


# ---------- Matcher ----------
def scan_file(path: str, pattern: re.Pattern, *, encoding: str = "utf-8", stop_event: threading.Event | None = None) -> list[Match] | None:
    """
    Return the matching lines of one file, or None when the file was skipped
    (binary, undecodable, unreadable). A stop request also returns None.
    """
    if is_binary_quick(path):
        logger.debug("Skipping binary file %s", path)
        return None

    found: list[Match] = []
    try:
        with open(path, "r", encoding=encoding, errors="strict", newline=None) as f:
            for i, raw in enumerate(f, 1):
                if stop_event is not None and stop_event.is_set():
                    return None
                line = raw[:-1] if raw.endswith("\n") else raw
                spans = tuple(m.span() for m in pattern.finditer(line))
                if spans:
                    found.append(Match(path, i, line, spans))
    except UnicodeDecodeError as e:
        logger.debug("Skipping undecodable file %s: %s", path, e)
        return None
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None
    return found


def scan_into(request: SearchRequest, store: ResultStore, *, stop_event: threading.Event | None = None,
              progress: ScanProgress | None = None) -> ScanProgress:
    progress = progress if progress is not None else ScanProgress()
    logger.info("Scanning %s for %r", request.root_path, request.pattern.pattern)

    for fpath in walk_files(request.root_path, request.options):
        if stop_event is not None and stop_event.is_set():
            logger.info("Scan stopped after %d files", progress.files_scanned)
            break
        progress.current_file = fpath
        found = scan_file(fpath, request.pattern, encoding=request.options.encoding, stop_event=stop_event)
        progress.files_scanned += 1
        if found is None:
            progress.files_skipped += 1
            continue
        try:
            progress.bytes_scanned += os.path.getsize(fpath)
        except OSError:
            pass
        for match in found:
            store.add(match)

    progress.done = True
    logger.info("Scan finished: %d files, %d skipped, %d matches",
                progress.files_scanned, progress.files_skipped, len(store))
    return progress


def search(request: SearchRequest, store: ResultStore | None = None) -> ResultStore:
    """Run the whole scan on the calling thread and return the filled store."""
    store = store if store is not None else ResultStore()
    scan_into(request, store)
    return store


class ScanWorker:
    """Runs scan_into on a daemon thread, streaming matches into the store."""

    def __init__(self, request: SearchRequest, store: ResultStore):
        self.request = request
        self.store = store
        self.progress = ScanProgress()
        self.stop_event = threading.Event()
        self.error: BaseException | None = None
        self._thread = threading.Thread(target=self._run, name="rstr-scan", daemon=True)

    def _run(self) -> None:
        try:
            scan_into(self.request, self.store, stop_event=self.stop_event, progress=self.progress)
        except Exception as e:
            logger.error("Scan failed: %s", e, exc_info=True)
            self.error = e
        finally:
            self.progress.done = True

    def start(self) -> "ScanWorker":
        self._thread.start()
        return self

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def stop(self, timeout: float = WORKER_JOIN_SECONDS) -> None:
        self.stop_event.set()
        if self._thread.is_alive():
            self._thread.join(timeout)


# ---------- Navigation ----------
class Action(Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOP = "top"
    BOTTOM = "bottom"
    QUIT = "quit"


class RunOutcome(Enum):
    RUNNING = "running"
    EXITING = "exiting"


@dataclass
class NavigationState:
    selected_index: int | None = None
    viewport_top: int = 0
    viewport_height: int = 1

    @property
    def is_idle(self) -> bool:
        return self.selected_index is None

    def sync(self, total: int, height: int) -> None:
        """Re-clamp after the result count or the viewport height changed."""
        self.viewport_height = max(1, height)
        if total <= 0:
            self.selected_index = None
            self.viewport_top = 0
            return
        if self.selected_index is None:
            self.selected_index = 0
        self.selected_index = min(self.selected_index, total - 1)
        self._follow(total)

    def apply(self, action: Action, total: int) -> None:
        if self.selected_index is None or total <= 0 or action is Action.QUIT:
            return
        height = self.viewport_height
        last = total - 1
        if action is Action.MOVE_DOWN:
            self.selected_index = min(self.selected_index + 1, last)
        elif action is Action.MOVE_UP:
            self.selected_index = max(self.selected_index - 1, 0)
        elif action is Action.PAGE_DOWN:
            self.selected_index = min(self.selected_index + height, last)
            self.viewport_top = self.selected_index - height // 2
        elif action is Action.PAGE_UP:
            self.selected_index = max(self.selected_index - height, 0)
            self.viewport_top = self.selected_index - height // 2
        elif action is Action.TOP:
            self.selected_index = 0
        elif action is Action.BOTTOM:
            self.selected_index = last
        self._follow(total)

    def _follow(self, total: int) -> None:
        height = self.viewport_height
        if self.selected_index < self.viewport_top:
            self.viewport_top = self.selected_index
        elif self.selected_index >= self.viewport_top + height:
            self.viewport_top = self.selected_index - height + 1
        self.viewport_top = max(0, min(self.viewport_top, max(0, total - height)))


# ---------- Keys ----------
class Key(Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    ESCAPE = "escape"
    QUIT = "q"
    INTERRUPT = "ctrl_c"


KEY_BINDINGS: dict[Key, Action] = {
    Key.UP: Action.MOVE_UP,
    Key.DOWN: Action.MOVE_DOWN,
    Key.PAGE_UP: Action.PAGE_UP,
    Key.PAGE_DOWN: Action.PAGE_DOWN,
    Key.HOME: Action.TOP,
    Key.END: Action.BOTTOM,
    Key.ESCAPE: Action.QUIT,
    Key.QUIT: Action.QUIT,
    Key.INTERRUPT: Action.QUIT,
}

_ESCAPE_SEQUENCES: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1bOA": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1bOB": Key.DOWN,
    "\x1b[5~": Key.PAGE_UP,
    "\x1b[6~": Key.PAGE_DOWN,
    "\x1b[H": Key.HOME,
    "\x1bOH": Key.HOME,
    "\x1b[1~": Key.HOME,
    "\x1b[7~": Key.HOME,
    "\x1b[F": Key.END,
    "\x1bOF": Key.END,
    "\x1b[4~": Key.END,
    "\x1b[8~": Key.END,
}

_PLAIN_KEYS: dict[str, Key] = {
    "q": Key.QUIT,
    "Q": Key.QUIT,
    "\x03": Key.INTERRUPT,
    "k": Key.UP,
    "j": Key.DOWN,
}


def decode_key(seq: str) -> Key | None:
    """Map a raw terminal byte sequence to a Key; unknown input maps to None."""
    if seq == "\x1b":
        return Key.ESCAPE
    if seq.startswith("\x1b"):
        return _ESCAPE_SEQUENCES.get(seq)
    return _PLAIN_KEYS.get(seq)


# ---------- Rendering ----------
_CONTROL_CHARS = {c: "?" for c in range(32) if c != 9}
_CONTROL_CHARS[127] = "?"

HIT_STYLE = "bold red"
SELECTED_STYLE = "reverse"
LOADING_DOTS = ["   ", ".  ", ".. ", "..."]


@dataclass(frozen=True)
class Frame:
    pattern: str
    root_path: str
    rows: tuple[Match, ...]
    first_index: int
    selected_index: int | None
    total: int
    scanning: bool
    progress: ScanProgress
    animation_frame: int = 0


def render_row(match: Match, root_path: str, *, selected: bool = False) -> Text:
    prefix = f"{os.path.relpath(match.file_path, root_path)}:{match.line_number} : "
    # same-length replacement keeps span offsets valid
    body = match.line_text.translate(_CONTROL_CHARS)
    row = Text(no_wrap=True, overflow="ellipsis")
    row.append(prefix, style="cyan")
    offset = len(row)
    row.append(body)
    for start, end in match.match_spans:
        if end > start:
            row.stylize(HIT_STYLE, offset + start, offset + end)
    if selected:
        row.stylize(SELECTED_STYLE)
    return row


def _render_header(frame: Frame) -> Panel:
    title = Text()
    title.append(f"Search term: '{frame.pattern}'", style="bold")
    title.append("  in  ", style="dim")
    title.append(frame.root_path, style="green")
    return Panel(title, title="rstr", subtitle="(Exit: q)", style="bold")


def _render_body(frame: Frame) -> Panel:
    dots = LOADING_DOTS[frame.animation_frame % len(LOADING_DOTS)]
    if frame.total == 0:
        if frame.scanning:
            body = Text(f"Current file: {frame.progress.current_file}", no_wrap=True, overflow="ellipsis")
            return Panel(body, title=f" Searching{dots} ", border_style="yellow")
        return Panel(Text("No matches.", style="dim"), title=" Found in ", border_style="cyan")

    rows = [
        render_row(match, frame.root_path, selected=(frame.first_index + offset == frame.selected_index))
        for offset, match in enumerate(frame.rows)
    ]
    title = f" Found in ({frame.total}) "
    if frame.scanning:
        title = f" Found in ({frame.total}) | Searching{dots} "
    return Panel(Group(*rows), title=title, border_style="cyan")


def _render_footer(frame: Frame) -> Panel:
    p = frame.progress
    status = Text(no_wrap=True, overflow="ellipsis")
    status.append(f"Files: {p.files_scanned}", style="bold")
    status.append(f"  Skipped: {p.files_skipped}", style="dim")
    status.append(f"  Read: {fmt_size(p.bytes_scanned)}", style="dim")
    status.append(f"  Matches: {frame.total}", style="bold")
    if frame.selected_index is not None:
        status.append(f"  [{frame.selected_index + 1}/{frame.total}]", style="yellow")
    status.append("   [Up/Down] Move  [PgUp/PgDn] Page  [Home/End] Jump  [q/Esc] Quit", style="dim")
    return Panel(status, style="dim")


def render_frame(frame: Frame) -> Layout:
    layout = Layout()
    layout.split_column(
        Layout(_render_header(frame), name="header", size=3),
        Layout(_render_body(frame), name="main", ratio=1),
        Layout(_render_footer(frame), name="footer", size=3),
    )
    return layout


# ---------- Terminal ----------
class RichTerminal:
    """
    Full-screen terminal backed by rich's Live display. Entering switches to
    the alternate screen and leaving restores it on every exit path. Keys are
    read with stdin in raw mode only for the duration of each read.
    """

    def __init__(self, console: Console | None = None, *, fd: int | None = None):
        self.console = console or Console()
        self._live: Live | None = None
        self._fd = fd

    def __enter__(self) -> "RichTerminal":
        if self._fd is None:
            if not sys.stdin.isatty():
                raise TerminalError("stdin is not a terminal")
            self._fd = sys.stdin.fileno()
        self._live = Live(console=self.console, screen=True, auto_refresh=False, transient=True)
        self._live.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._live is not None:
            self._live.stop()
            self._live = None
        return False

    def viewport_height(self) -> int:
        return max(1, self.console.size.height - CHROME_ROWS)

    def draw(self, frame: Frame) -> None:
        if self._live is None:
            raise TerminalError("terminal is not active")
        self._live.update(render_frame(frame), refresh=True)

    def next_key(self, timeout: float | None = None) -> Key | None:
        seq = self._read_sequence(timeout)
        if not seq:
            return None
        return decode_key(seq)

    def _read_sequence(self, timeout: float | None) -> str:
        import termios
        import tty

        fd = self._fd
        old_settings = termios.tcgetattr(fd)
        try:
            # TCSANOW keeps keys typed ahead of this read
            tty.setraw(fd, termios.TCSANOW)
            ready, _, _ = select.select([fd], [], [], timeout)
            if not ready:
                return ""
            ch = self._read_byte(fd)
            if ch != "\x1b":
                return ch
            seq = ch
            while len(seq) < 8:
                ready, _, _ = select.select([fd], [], [], 0.02)
                if not ready:
                    break
                nxt = self._read_byte(fd)
                seq += nxt
                # CSI "\x1b[" and SS3 "\x1bO" introducers are not the final byte
                if len(seq) == 2 and nxt in "[O":
                    continue
                if nxt.isalpha() or nxt == "~":
                    break
            return seq
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)

    @staticmethod
    def _read_byte(fd: int) -> str:
        data = os.read(fd, 1)
        if not data:
            raise TerminalError("stdin closed")
        return data.decode("latin-1")


# ---------- Browser ----------
class ResultBrowser:
    """The render/input loop: paint, wait for a key, apply it, repeat until quit."""

    def __init__(self, request: SearchRequest, store: ResultStore, terminal, *,
                 worker: ScanWorker | None = None, progress: ScanProgress | None = None,
                 pattern_text: str | None = None):
        self.request = request
        self.store = store
        self.terminal = terminal
        self.worker = worker
        self.pattern_text = pattern_text if pattern_text is not None else request.pattern.pattern
        self.nav = NavigationState()
        self.outcome = RunOutcome.RUNNING
        self._tick = 0
        self._last_tick = time.monotonic()
        if worker is not None:
            self.progress = worker.progress
        else:
            self.progress = progress if progress is not None else ScanProgress(done=True)

    @property
    def scanning(self) -> bool:
        return self.worker is not None and not self.worker.progress.done

    def run(self) -> RunOutcome:
        try:
            while self.outcome is RunOutcome.RUNNING:
                if self.worker is not None and self.worker.error is not None:
                    raise self.worker.error
                self.terminal.draw(self.build_frame())
                key = self.terminal.next_key(timeout=SCAN_REFRESH_SECONDS if self.scanning else None)
                if key is None:
                    continue
                action = KEY_BINDINGS.get(key)
                if action is not None:
                    self.dispatch(action)
        finally:
            if self.worker is not None:
                self.worker.stop()
        return self.outcome

    def dispatch(self, action: Action) -> None:
        if action is Action.QUIT:
            logger.info("Quit requested")
            self.outcome = RunOutcome.EXITING
            return
        total = len(self.store)
        self.nav.sync(total, self.terminal.viewport_height())
        self.nav.apply(action, total)

    def build_frame(self) -> Frame:
        total = len(self.store)
        self.nav.sync(total, self.terminal.viewport_height())
        rows = tuple(self.store.window(self.nav.viewport_top, self.nav.viewport_height))
        scanning = self.scanning
        if scanning and time.monotonic() - self._last_tick >= SCAN_REFRESH_SECONDS:
            self._tick = (self._tick + 1) % len(LOADING_DOTS)
            self._last_tick = time.monotonic()
        return Frame(
            pattern=self.pattern_text,
            root_path=self.request.root_path,
            rows=rows,
            first_index=self.nav.viewport_top,
            selected_index=self.nav.selected_index,
            total=total,
            scanning=scanning,
            progress=self.progress,
            animation_frame=self._tick,
        )


# ---------- CLI ----------
def configure_logging(log_file: str | None, *, verbose: bool = False) -> logging.Handler | None:
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not log_file:
        return None
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)
    logger.info("Logging enabled.")
    return handler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rstr",
        description="A simple search tool with regex support and TUI display",
    )
    parser.add_argument("path", help="The path in which to search")
    parser.add_argument("pattern", help="The search pattern (Regex)")
    parser.add_argument("-i", "--ignore-case", action="store_true", help="Match case-insensitively")
    parser.add_argument("--include", action="append", default=[], metavar="GLOB",
                        help="Only search file names matching GLOB (repeatable)")
    parser.add_argument("--exclude", action="append", default=[], metavar="GLOB",
                        help="Skip files and folders matching GLOB (repeatable)")
    parser.add_argument("--max-mb", type=float, default=0.0, help="Skip files larger than this many MB")
    parser.add_argument("--max-depth", type=int, default=None, help="Do not descend deeper than this")
    parser.add_argument("--skip-hidden", action="store_true", help="Skip hidden files and folders")
    parser.add_argument("--gitignore", action="store_true", help="Respect the root .gitignore")
    parser.add_argument("--encoding", default="utf-8", help="Text encoding of searched files")
    parser.add_argument("--log-file", default=None, help="Write a log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log skipped files too")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_request(parser: argparse.ArgumentParser, args: argparse.Namespace) -> SearchRequest:
    if not os.path.isdir(args.path) or not os.access(args.path, os.R_OK | os.X_OK):
        parser.error(f"not an accessible directory: {args.path}")
    if args.max_depth is not None and args.max_depth < 0:
        parser.error("--max-depth must not be negative")
    try:
        codecs.lookup(args.encoding)
    except LookupError:
        parser.error(f"unknown encoding: {args.encoding}")
    options = SearchOptions(
        ignore_case=args.ignore_case,
        include_globs=tuple(args.include),
        exclude_globs=tuple(args.exclude),
        max_mb=max(0.0, args.max_mb),
        depth_limit=args.max_depth,
        skip_hidden=args.skip_hidden,
        respect_gitignore=args.gitignore,
        encoding=args.encoding,
    )
    try:
        return SearchRequest.build(args.path, args.pattern, options)
    except re.error as e:
        parser.error(f"invalid pattern {args.pattern!r}: {e}")


def main(argv: list[str] | None = None, *, terminal_factory=RichTerminal) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    request = parse_request(parser, args)
    handler = configure_logging(args.log_file, verbose=args.verbose)

    store = ResultStore()
    worker = ScanWorker(request, store)
    try:
        with terminal_factory() as terminal:
            worker.start()
            ResultBrowser(request, store, terminal, worker=worker, pattern_text=args.pattern).run()
    except (OSError, TerminalError) as e:
        logger.error("Fatal terminal error: %s", e, exc_info=True)
        print(f"rstr: error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    finally:
        worker.stop()
        if handler is not None:
            logger.removeHandler(handler)
            handler.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
