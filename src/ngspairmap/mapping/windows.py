"""Windowed coverage for export and visualization."""

from typing import Iterator, Tuple

from .depth import DepthAccumulator
from .store import SequenceStore

DEFAULT_WINDOW_SIZE = 120
DEFAULT_MARGIN = 10
DEFAULT_STEP = 10


def check_window_params(window_size: int, margin: int, step: int) -> None:
    if window_size <= 0:
        raise ValueError(f"window_size must be > 0, got {window_size}")
    if step <= 0:
        raise ValueError(f"step must be > 0, got {step}")
    if margin < 0:
        raise ValueError(f"margin must be >= 0, got {margin}")
    if 2 * margin > window_size:
        raise ValueError(f"margin {margin} leaves no inner span in a {window_size} bp window")


class CoverageWindows:
    """
    Restartable iterable of ``(summed_depth, window_sequence)`` for one replicon.

    Every ``iter()`` starts again from offset 0 and reads the accumulator
    as it is at that moment.
    """

    def __init__(
        self,
        depth: DepthAccumulator,
        replicon_id: str,
        sequence: str,
        length: int,
        window_size: int,
        margin: int,
        step: int,
    ):
        self._depth = depth
        self.replicon_id = replicon_id
        self._sequence = sequence
        self._length = length
        self.window_size = window_size
        self.margin = margin
        self.step = step

    def offsets(self) -> range:
        return range(0, self._length - self.window_size + 1, self.step)

    def __iter__(self) -> Iterator[Tuple[int, str]]:
        inner_start = self.margin
        inner_end = self.window_size - self.margin
        depth = self._depth.combined(self.replicon_id)
        for offset in self.offsets():
            summed = int(depth[offset + inner_start:offset + inner_end].sum())
            yield summed, self._sequence[offset:offset + self.window_size]

    def __len__(self) -> int:
        return len(self.offsets())


class CoverageWindower:
    """Derive windowed depth plus sequence snapshots after mapping."""

    def __init__(self, store: SequenceStore, depth: DepthAccumulator):
        self.store = store
        self.depth = depth

    def windows(
        self,
        replicon_id: str,
        window_size: int = DEFAULT_WINDOW_SIZE,
        margin: int = DEFAULT_MARGIN,
        step: int = DEFAULT_STEP,
    ) -> CoverageWindows:
        """
        Windowed coverage of one replicon.

        Args:
            replicon_id: Replicon to summarize
            window_size: Window length in bases
            margin: Bases trimmed from each side before summing depth
            step: Offset increment between windows

        Returns:
            CoverageWindows yielding (summed plus+minus depth, window sequence)
        """
        check_window_params(window_size, margin, step)
        replicon = self.store[replicon_id]
        return CoverageWindows(
            depth=self.depth,
            replicon_id=replicon_id,
            sequence=replicon.window_sequence,
            length=replicon.length,
            window_size=window_size,
            margin=margin,
            step=step,
        )
