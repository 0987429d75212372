"""
Admission control for fan-out, without locks.

Each worker thread keeps its own counter in a threading.local, so no two
threads ever touch the same integer and nothing needs a mutex. The
ceiling is shared and read-only once the search starts.

The weight of a request is the number of sibling branches about to be
explored. The search acquires and releases within one state's expansion,
so the counter is back at zero before the next state is expanded and the
ceiling works as a per-state fan-out cap: a state with ceiling or more
children has all of them rejected, however shallow it is. It is not a
call-depth guard and does not limit the total size of the search.

    limiter = RecursionLimiter(ceiling=64)
    with limiter.admit(len(children)) as admitted:
        if admitted:
            ...explore children...
        else:
            ...skip them and count the rejection...
"""

from contextlib import contextmanager
import threading

DEFAULT_CEILING = 4096


class RecursionLimiter:

    def __init__(self, ceiling: int = DEFAULT_CEILING):
        if ceiling < 1:
            raise ValueError(f"ceiling must be positive, got {ceiling}")
        self.ceiling = ceiling
        self._local = threading.local()

    @property
    def counter(self) -> int:
        """The calling thread's running total."""
        return getattr(self._local, "counter", 0)

    def try_acquire(self, weight: int) -> bool:
        """Admit iff counter + weight < ceiling. A refusal changes nothing."""
        if weight < 0:
            raise ValueError(f"weight must be non-negative, got {weight}")
        counter = self.counter
        if counter + weight < self.ceiling:
            self._local.counter = counter + weight
            return True
        return False

    def release(self, weight: int):
        counter = self.counter - weight
        if counter < 0:
            raise RuntimeError(
                f"release({weight}) without a matching acquire (counter {self.counter})"
            )
        self._local.counter = counter

    @contextmanager
    def admit(self, weight: int):
        """Yield whether weight was admitted; release on every exit path."""
        admitted = self.try_acquire(weight)
        try:
            yield admitted
        finally:
            if admitted:
                self.release(weight)

    def to_dict(self):
        return {"ceiling": self.ceiling}

    @classmethod
    def from_dict(cls, d):
        return cls(d.get("ceiling", DEFAULT_CEILING))

    def __repr__(self):
        return f"RecursionLimiter(ceiling={self.ceiling})"
