"""
Step contracts and payload type compatibility.

A step is a stateless coroutine with a declared input type and output type.
Payload types are plain classes, usually frozen dataclasses. Two dataclasses
are structurally compatible when the producer carries every required field
of the consumer with the same annotation.
"""

import dataclasses
import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, get_type_hints

from ..errors import StepContractError

InT = TypeVar("InT")
OutT = TypeVar("OutT")


class StepContract(ABC, Generic[InT, OutT]):
    """
    One stage of a pipeline.

    Subclasses set ``id``, ``input_type`` and ``output_type`` and implement
    ``execute``. Steps must not keep state between invocations and never
    retry internally.
    """

    id: str = ""
    input_type: type = object
    output_type: type = object

    @abstractmethod
    async def execute(self, payload: InT) -> OutT:
        """Run the step on a payload of ``input_type``."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self.id!r}, "
            f"input={_type_name(self.input_type)}, output={_type_name(self.output_type)})"
        )


class FunctionStep(StepContract[InT, OutT]):
    """Adapts a coroutine function to a step contract."""

    def __init__(
        self,
        step_id: str,
        input_type: type,
        output_type: type,
        func: Callable[[InT], Awaitable[OutT]],
    ) -> None:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Step '{step_id}' requires a coroutine function")
        self.id = step_id
        self.input_type = input_type
        self.output_type = output_type
        self._func = func

    async def execute(self, payload: InT) -> OutT:
        return await self._func(payload)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", repr(tp))


def _has_default(field: dataclasses.Field) -> bool:
    return (field.default is not dataclasses.MISSING
            or field.default_factory is not dataclasses.MISSING)


def describe_mismatch(produced: type, expected: type) -> Optional[str]:
    """
    Explain why values of ``produced`` cannot feed a consumer of ``expected``.

    Returns:
        None when the types are compatible, otherwise a short description
    """
    if produced is expected or expected is object:
        return None

    if inspect.isclass(produced) and inspect.isclass(expected) and issubclass(produced, expected):
        return None

    if not (dataclasses.is_dataclass(produced) and dataclasses.is_dataclass(expected)):
        return f"{_type_name(produced)} is not compatible with {_type_name(expected)}"

    produced_hints = get_type_hints(produced)
    expected_hints = get_type_hints(expected)

    for field in dataclasses.fields(expected):
        if not field.init:
            continue
        if field.name not in produced_hints:
            if _has_default(field):
                continue
            return f"{_type_name(produced)} is missing field '{field.name}'"
        if produced_hints[field.name] != expected_hints[field.name]:
            return (
                f"field '{field.name}' is {produced_hints[field.name]!r} in "
                f"{_type_name(produced)} but {expected_hints[field.name]!r} in "
                f"{_type_name(expected)}"
            )

    return None


def is_compatible(produced: type, expected: type) -> bool:
    """True if values of ``produced`` can be fed to a consumer of ``expected``."""
    return describe_mismatch(produced, expected) is None


def coerce_payload(payload: Any, expected: type, step_id: Optional[str] = None) -> Any:
    """
    Present a payload as an instance of ``expected``.

    Instances pass through unchanged. Dataclass payloads that are structurally
    compatible are rebuilt as ``expected`` from their shared fields.

    Raises:
        StepContractError: If the payload cannot be presented as ``expected``
    """
    if isinstance(payload, expected):
        return payload

    mismatch = describe_mismatch(type(payload), expected)
    if mismatch is not None or not dataclasses.is_dataclass(expected):
        raise StepContractError(
            f"Payload for step '{step_id}' does not match its input type: "
            f"{mismatch or 'not a dataclass'}",
            step_id=step_id,
            expected_type=_type_name(expected),
            actual_type=_type_name(type(payload)),
        )

    values = {
        field.name: getattr(payload, field.name)
        for field in dataclasses.fields(expected)
        if field.init and hasattr(payload, field.name)
    }
    return expected(**values)
