"""
Console progress bar driven by iteration.

Wraps any iterable so that every ``next()`` redraws a status line in place:

    for element in ProgressBar(items):
        ...

Bars start out unbounded and only report a running count and elapsed time.
When the wrapped iterable knows its length the bar can be bounded, which
adds a percentage and a filled/unfilled bar:

    for element in ProgressBar(items).with_bounds().with_delims(('<', '>')):
        ...

Which operations are legal depends on the mode. ``with_bounds()`` is only
offered on unbounded bars over sized iterables and ``with_delims()`` only on
bounded bars. Type checkers reject the wrong calls through the self-type
annotations; at runtime they raise ``CapabilityError``.
"""
from __future__ import annotations

import sys
import time
from collections.abc import Sized
from typing import Any, Generic, Iterable, Iterator, TextIO, TypeVar

# Clear to end of screen, then move the cursor up one line
CLEAR = '\x1b[0J\x1b[1A'
MAX_COLUMN_WIDTH = 30

FILLED = '▓'
EMPTY = '░'
DEFAULT_DELIMS: tuple[str, str] = ('[', ']')

T = TypeVar('T')


class ProgressBarError(Exception):
    """Base exception for progress bar misuse."""
    pass


class CapabilityError(ProgressBarError, TypeError):
    """Operation is not offered by the bar's current mode or iterable."""
    pass


class ProgressBarMovedError(ProgressBarError, RuntimeError):
    """Bar was used after ``with_bounds()`` handed its iterator on."""
    pass


def _check_delims(delims: tuple[str, str]) -> tuple[str, str]:
    """Validate a delimiter pair.

    Args:
        delims: Opening and closing characters.

    Returns:
        The pair as a tuple.

    Raises:
        ValueError: If the pair is not two single characters.
    """
    try:
        opening, closing = delims
    except (TypeError, ValueError):
        raise ValueError(f"Delimiters must be a pair of characters: {delims!r}")
    for delim in (opening, closing):
        if not isinstance(delim, str) or len(delim) != 1:
            raise ValueError(f"Delimiter must be a single character: {delim!r}")
    return (opening, closing)


class Unbounded:
    """Display mode for iterables of unknown length."""

    def format_line(self, index: int, elapsed: float) -> str:
        """Build the status line for an unknown total.

        Args:
            index: Number of retrievals before this one.
            elapsed: Seconds since the bar started.

        Returns:
            The status line without escape codes or newline.
        """
        return f"[{index} in {elapsed:.4f} Secs] "

    def display(self, progress: ProgressBar[Any, Unbounded]) -> None:
        progress._write(self.format_line(progress.index, progress.elapsed))

    def __repr__(self) -> str:
        return "Unbounded()"


class Bounded:
    """Display mode for iterables whose total is known up front.

    The total is fixed once the mode is created. The delimiters around the
    bar can be changed at any time and are read on every render.
    """

    def __init__(self, bound: int, delims: tuple[str, str] = DEFAULT_DELIMS) -> None:
        """Initialize the bounded mode.

        Args:
            bound: Total number of items.
            delims: Characters drawn around the bar.
        """
        if bound < 0:
            raise ValueError(f"Bound must be non-negative: {bound}")
        self._bound = bound
        self.delims = delims

    @property
    def bound(self) -> int:
        return self._bound

    @property
    def delims(self) -> tuple[str, str]:
        return self._delims

    @delims.setter
    def delims(self, delims: tuple[str, str]) -> None:
        self._delims = _check_delims(delims)

    def percent(self, index: int) -> int:
        """Return completion as a whole percentage.

        An empty total counts as complete. Indexes past the total (retrieval
        attempts after exhaustion) are clamped to 100.
        """
        if self._bound == 0:
            return 100
        return min(index, self._bound) * 100 // self._bound

    def get_bar(self, index: int) -> str:
        """Generate the filled/unfilled part of the bar.

        Small totals are drawn one glyph per item. Totals of
        ``MAX_COLUMN_WIDTH`` and above are scaled to that many columns.

        Args:
            index: Number of retrievals before this one.

        Returns:
            The bar glyphs without delimiters.
        """
        if self._bound < MAX_COLUMN_WIDTH:
            width = self._bound
            filled = min(index, self._bound)
        else:
            width = MAX_COLUMN_WIDTH
            filled = MAX_COLUMN_WIDTH * self.percent(index) // 100
        return FILLED * filled + EMPTY * (width - filled)

    def format_line(self, index: int, elapsed: float) -> str:
        """Build the status line for a known total.

        Args:
            index: Number of retrievals before this one.
            elapsed: Seconds since the bar was bounded.

        Returns:
            The status line without escape codes or newline.
        """
        opening, closing = self._delims
        return (
            f"{self.percent(index):3}% {opening}{self.get_bar(index)}{closing} "
            f"{index}/{self._bound} {elapsed:.4f} Secs"
        )

    def display(self, progress: ProgressBar[Any, Bounded]) -> None:
        progress._write(self.format_line(progress.index, progress.elapsed))

    def __repr__(self) -> str:
        return f"Bounded(bound={self._bound}, delims={self._delims!r})"


M = TypeVar('M', Unbounded, Bounded)


class ProgressBar(Generic[T, M]):
    """
    Iterator that redraws a progress line each time an item is requested.
    Yields the wrapped iterable's items unchanged.
    """

    def __init__(self: ProgressBar[T, Unbounded], iterable: Iterable[T], file: TextIO | None = None) -> None:
        """Wrap an iterable in an unbounded progress bar.

        A blank line is written straight away so the first redraw has a
        line to move back onto.

        Args:
            iterable: Items to iterate over. May be infinite.
            file: Stream to draw on. Defaults to the current ``sys.stdout``.

        Raises:
            TypeError: If ``iterable`` is not iterable.
        """
        self._source: Iterable[T] = iterable
        self._iter: Iterator[T] | None = iter(iterable)
        self.index: int = 0
        self.mode: M = Unbounded()  # type: ignore[assignment]
        self.file = file
        self._write_raw("\n")
        self.start: float = time.time()

    @property
    def elapsed(self) -> float:
        """Seconds since the bar started or was last bounded."""
        return time.time() - self.start

    @property
    def moved(self) -> bool:
        """Whether ``with_bounds()`` has handed this bar's iterator on."""
        return self._iter is None

    def _check_alive(self) -> Iterator[T]:
        if self._iter is None:
            raise ProgressBarMovedError(
                "progress bar was consumed by with_bounds(); use the bar it returned"
            )
        return self._iter

    def _remaining(self) -> int:
        """Return how many items are left without consuming any.

        Raises:
            CapabilityError: If neither the iterator nor the iterable is sized.
        """
        if isinstance(self._iter, Sized):
            return len(self._iter)
        if isinstance(self._source, Sized):
            return max(len(self._source) - self.index, 0)
        raise CapabilityError(
            f"with_bounds() needs an iterable with a known length, "
            f"got {type(self._source).__name__}"
        )

    def with_bounds(self: ProgressBar[T, Unbounded]) -> ProgressBar[T, Bounded]:
        """Switch to a bounded bar over the items that remain.

        The elapsed time restarts; the index carries over. This bar is moved
        into the returned one and must not be used again.

        Returns:
            A new bounded bar sharing this bar's iterator.

        Raises:
            CapabilityError: If the bar is already bounded or the iterable
                has no length.
            ProgressBarMovedError: If this bar was already moved.
        """
        iterator = self._check_alive()
        if not isinstance(self.mode, Unbounded):
            raise CapabilityError("with_bounds() is only offered on unbounded progress bars")

        bar: ProgressBar[T, Bounded] = ProgressBar.__new__(ProgressBar)
        bar._source = self._source
        bar._iter = iterator
        bar.index = self.index
        bar.mode = Bounded(self._remaining())
        bar.file = self.file
        bar.start = time.time()

        self._iter = None
        return bar

    def with_delims(self: ProgressBar[T, Bounded], delims: tuple[str, str]) -> ProgressBar[T, Bounded]:
        """Set the characters drawn around the bar.

        Args:
            delims: Opening and closing characters, e.g. ``('<', '>')``.

        Returns:
            This bar.

        Raises:
            CapabilityError: If the bar is not bounded.
            ValueError: If ``delims`` is not a pair of single characters.
        """
        self._check_alive()
        if not isinstance(self.mode, Bounded):
            raise CapabilityError("with_delims() is only offered on bounded progress bars")
        self.mode.delims = delims
        return self

    def __iter__(self) -> ProgressBar[T, M]:
        return self

    def __next__(self) -> T:
        # Render, count, then fetch: the attempt that hits exhaustion
        # still renders once.
        iterator = self._check_alive()
        self.mode.display(self)  # type: ignore[arg-type]
        self.index += 1
        return next(iterator)

    def _write(self, line: str) -> None:
        self._write_raw(f"{CLEAR}{line}\n")

    def _write_raw(self, text: str) -> None:
        stream = self.file if self.file is not None else sys.stdout
        stream.write(text)
        stream.flush()

    def __repr__(self) -> str:
        return f"ProgressBar(index={self.index}, mode={self.mode!r})"


def progress_bar(
    iterable: Iterable[T],
    delims: tuple[str, str] | None = None,
    file: TextIO | None = None,
) -> ProgressBar[T, Any]:
    """Wrap an iterable, bounding the bar whenever its length is known.

    Args:
        iterable: Items to iterate over.
        delims: Characters drawn around the bar. Needs a sized iterable.
        file: Stream to draw on. Defaults to the current ``sys.stdout``.

    Returns:
        A bounded bar for sized iterables, an unbounded one otherwise.

    Raises:
        CapabilityError: If ``delims`` is given for an unsized iterable.

    Example:
        >>> for item in progress_bar(range(100)):
        ...     process(item)
    """
    if not isinstance(iterable, Sized):
        if delims is not None:
            raise CapabilityError("delimiters need an iterable with a known length")
        return ProgressBar(iterable, file=file)

    bar = ProgressBar(iterable, file=file).with_bounds()
    if delims is not None:
        bar.with_delims(delims)
    return bar


__all__ = [
    'CLEAR',
    'DEFAULT_DELIMS',
    'EMPTY',
    'FILLED',
    'MAX_COLUMN_WIDTH',
    'Bounded',
    'CapabilityError',
    'ProgressBar',
    'ProgressBarError',
    'ProgressBarMovedError',
    'Unbounded',
    'progress_bar',
]
