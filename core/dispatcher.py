from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Optional, Union

from observability.metrics import UNKNOWN_TOOL_LABEL, record_invocation

from .envelope import ResponseEnvelope, wrap_result
from .errors import CapabilityError, ErrorKind, ErrorResult, ValidationError
from .registry import Capability, ToolRegistry
from .validator import validate

logger = logging.getLogger(__name__)

DispatchResult = Union[ResponseEnvelope, ErrorResult]


class Dispatcher:
    """Resolve, validate and execute one tool call per ``invoke``.

    Every failure comes back as an ``ErrorResult`` value; nothing short of
    cancellation escapes ``invoke``. The dispatcher keeps no per-call state,
    so one instance can serve any number of concurrent invocations.
    """

    def __init__(self, registry: ToolRegistry, *, timeout: Optional[float] = None) -> None:
        self.registry = registry
        self.timeout = timeout

    async def invoke(self, name: str, raw_input: Any = None) -> DispatchResult:
        started = time.perf_counter()
        capability = self.registry.lookup(name)
        if capability is None:
            result: DispatchResult = self._not_found(name)
            self._record(UNKNOWN_TOOL_LABEL, result, started)
            return result

        try:
            arguments = validate(capability.schema, raw_input)
        except ValidationError as e:
            logger.info("Rejected input for %s: %s", name, e.message)
            result = e.to_result()
            self._record(name, result, started)
            return result

        result = await self._execute(capability, arguments)
        self._record(name, result, started)
        return result

    async def _execute(self, capability: Capability, arguments: dict) -> DispatchResult:
        try:
            if inspect.iscoroutinefunction(capability.execute):
                call = capability.execute(arguments)
            else:
                loop = asyncio.get_running_loop()
                call = loop.run_in_executor(None, functools.partial(capability.execute, arguments))
            if self.timeout is None:
                value = await call
            else:
                try:
                    value = await asyncio.wait_for(call, self.timeout)
                except asyncio.TimeoutError:
                    logger.warning("Tool %s timed out after %ss", capability.name, self.timeout)
                    return self._execution_error(capability.name, f"timed out after {self.timeout}s")
            if inspect.isawaitable(value):
                value = await value
            return wrap_result(value)
        except CapabilityError as e:
            logger.info("Tool %s reported failure: %s", capability.name, e)
            return self._execution_error(capability.name, str(e))
        except Exception as e:  # surface as standard error
            logger.exception("Tool %s failed", capability.name)
            return self._execution_error(capability.name, f"{type(e).__name__}: {e}")

    # --- Utilities ---
    def _not_found(self, name: str) -> ErrorResult:
        available = list(self.registry.names())
        logger.info("Unknown tool requested: %s", name)
        return ErrorResult(
            kind=ErrorKind.TOOL_NOT_FOUND,
            message=f"Unknown tool: {name}. Available tools: {', '.join(available) or '(none)'}",
            details={"tool": name, "availableTools": available},
        )

    @staticmethod
    def _execution_error(name: str, reason: str) -> ErrorResult:
        return ErrorResult(
            kind=ErrorKind.EXECUTION,
            message=f"Tool execution failed: {reason}",
            details={"tool": name},
        )

    @staticmethod
    def _record(tool: str, result: DispatchResult, started: float) -> None:
        outcome = "success" if isinstance(result, ResponseEnvelope) else result.kind.value
        elapsed = time.perf_counter() - started
        if outcome == "success":
            logger.debug("Tool %s succeeded in %.3fs", tool, elapsed)
        record_invocation(tool, outcome, elapsed)


async def invoke(registry: ToolRegistry, name: str, raw_input: Any = None) -> DispatchResult:
    """One-shot form of ``Dispatcher(registry).invoke(name, raw_input)``."""
    return await Dispatcher(registry).invoke(name, raw_input)
