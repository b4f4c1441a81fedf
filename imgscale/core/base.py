"""
Base classes and protocols for imgscale.

Processing stages are small filter objects with an ``apply`` method that
returns a new PixelBuffer; a FilterChain runs them in order.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from imgscale.core.buffer import PixelBuffer


@dataclass
class ProcessingContext:
    """
    Context object passed through the processing pipeline.

    Carries the run-level switches that are not part of the transform itself.
    """
    verbose: bool = False
    workers: int = 1


@runtime_checkable
class BufferFilter(Protocol):
    """Protocol for pixel stages that map one buffer to a new buffer."""

    name: str

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Apply the filter to a buffer."""
        ...


class FilterChain:
    """
    A chain of buffer filters applied in sequence.

    Each filter receives the previous filter's output; the chain holds a
    single reference to the current buffer, so an intermediate is released
    as soon as the next stage has produced its result.

    Example:
        chain = FilterChain()
        chain.add(SharpenFilter(1.0))
        chain.add(SaturationFilter(1.3))

        processed = chain.apply(buffer)
    """

    def __init__(self, filters: list[BufferFilter] | None = None):
        self.filters = filters or []

    def add(self, filter_: BufferFilter) -> "FilterChain":
        """Add a filter to the chain."""
        self.filters.append(filter_)
        return self

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        """Apply all filters in sequence."""
        result = buffer
        for f in self.filters:
            result = f.apply(result)
        return result

    def stage_names(self) -> list[str]:
        """Names of the stages that will run, in order."""
        return [f.name for f in self.filters]

    def __len__(self) -> int:
        return len(self.filters)
