"""
Explicit success/failure variant for collaborator calls.

Workflow steps never let a collaborator exception travel implicitly to
the next step.  Each call is wrapped with ``Result.capture`` which runs
it, applies a pure classifier to whatever it raises, and hands back a
``Result`` the workflow branches on.
"""
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from src.rwaflow.core.errors import RWAOrchestrationError

T = TypeVar("T")

Classifier = Callable[[Exception], RWAOrchestrationError]


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[RWAOrchestrationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: RWAOrchestrationError) -> "Result[T]":
        return cls(error=error)

    @classmethod
    def capture(cls, fn: Callable[[], T], classify: Classifier) -> "Result[T]":
        """Run *fn* and convert any raised exception with *classify*.

        Errors already in the taxonomy are expected to pass through the
        classifier unchanged.
        """
        try:
            return cls.success(fn())
        except Exception as e:
            return cls.failure(classify(e))

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value
