import asyncio
import time

import pytest

from core.dispatcher import Dispatcher, invoke
from core.envelope import JsonContent, ResponseEnvelope, TextContent, text
from core.errors import CapabilityError, ErrorKind, ErrorResult
from core.registry import Capability, ToolRegistry
from core.schema import EMPTY_SCHEMA, FieldKind, FieldSpec, Schema
from observability.metrics import UNKNOWN_TOOL_LABEL, invocation_count


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def plan_registry():
    reg = ToolRegistry()

    @reg.tool("get_plan", "Plan by level", Schema.build(
        required=["level"],
        level=FieldSpec(FieldKind.STRING, allowed_values=("1", "2")),
    ))
    def get_plan(args):
        return text("plan-for-" + args["level"])

    return reg.freeze()


@pytest.fixture
def bounded_registry():
    reg = ToolRegistry()
    reg.register(Capability(
        "bounded",
        "Needs a bounded number",
        Schema.build(required=["f"], f=FieldSpec(FieldKind.NUMBER, min=1, max=10)),
        lambda args: {"f": args["f"]},
    ))
    return reg


def test_end_to_end_plan_example(plan_registry):
    ok = run(invoke(plan_registry, "get_plan", {"level": "1"}))
    assert ok == ResponseEnvelope.of(TextContent("plan-for-1"))
    assert ok.to_dict() == {"content": [{"type": "text", "text": "plan-for-1"}]}

    bad = run(invoke(plan_registry, "get_plan", {"level": "9"}))
    assert isinstance(bad, ErrorResult)
    assert bad.kind is ErrorKind.INVALID_ENUM
    assert bad.field == "level"

    missing = run(invoke(plan_registry, "missing", {"level": "1"}))
    assert missing.kind is ErrorKind.TOOL_NOT_FOUND


def test_unknown_tool_message_lists_valid_names(plan_registry):
    result = run(Dispatcher(plan_registry).invoke("nope"))
    assert "nope" in result.message
    assert "get_plan" in result.message
    assert result.details["availableTools"] == ["get_plan"]


@pytest.mark.parametrize("raw, kind", [
    ({}, ErrorKind.MISSING_FIELD),
    ({"f": 0}, ErrorKind.RANGE),
    ({"f": 11}, ErrorKind.RANGE),
    ({"f": "5"}, ErrorKind.TYPE_MISMATCH),
    ("f=5", ErrorKind.MALFORMED_INPUT),
    (None, ErrorKind.MALFORMED_INPUT),
])
def test_validation_failures_map_to_error_results(bounded_registry, raw, kind):
    result = run(invoke(bounded_registry, "bounded", raw))
    assert isinstance(result, ErrorResult)
    assert result.kind is kind
    assert result.is_validation_error


def test_missing_field_names_the_field(bounded_registry):
    result = run(invoke(bounded_registry, "bounded", {}))
    assert result.field == "f"


def test_content_is_returned_unmodified():
    payload = {"nested": {"list": [1, 2, {"x": None}]}, "text": "  spaced  \n\n\n"}
    items = [TextContent("  spaced  \n\n\n"), JsonContent(payload)]
    reg = ToolRegistry([Capability("raw", "r", EMPTY_SCHEMA, lambda args: items)])
    result = run(invoke(reg, "raw"))
    assert list(result.content) == items
    assert result.content[1].value is payload


@pytest.mark.parametrize("returned, expected", [
    ("hello", (TextContent("hello"),)),
    ({"a": 1}, (JsonContent({"a": 1}),)),
    (TextContent("t"), (TextContent("t"),)),
    (ResponseEnvelope.of(JsonContent([1])), (JsonContent([1]),)),
])
def test_return_shapes_are_wrapped(returned, expected):
    reg = ToolRegistry([Capability("shape", "s", EMPTY_SCHEMA, lambda args: returned)])
    result = run(invoke(reg, "shape", {}))
    assert result.content == expected


def test_unsupported_return_type_is_execution_error():
    reg = ToolRegistry([Capability("bad", "b", EMPTY_SCHEMA, lambda args: 42)])
    result = run(invoke(reg, "bad"))
    assert result.kind is ErrorKind.EXECUTION


def test_business_failure_is_caught_and_dispatcher_stays_usable():
    calls = []

    def flaky(args):
        calls.append(args)
        if args.get("boom"):
            raise RuntimeError("invariant violated")
        return "fine"

    reg = ToolRegistry([Capability("flaky", "f", EMPTY_SCHEMA, flaky)])
    dispatcher = Dispatcher(reg)
    failed = run(dispatcher.invoke("flaky", {"boom": True}))
    assert failed.kind is ErrorKind.EXECUTION
    assert "RuntimeError: invariant violated" in failed.message
    assert failed.details == {"tool": "flaky"}

    ok = run(dispatcher.invoke("flaky", {}))
    assert ok == text("fine")
    assert len(calls) == 2


def test_capability_error_message_is_passed_through():
    def refuse(args):
        raise CapabilityError("plan not available")

    reg = ToolRegistry([Capability("refuse", "r", EMPTY_SCHEMA, refuse)])
    result = run(invoke(reg, "refuse"))
    assert result.kind is ErrorKind.EXECUTION
    assert result.message == "Tool execution failed: plan not available"


def test_async_capabilities_are_awaited():
    async def slow_echo(args):
        await asyncio.sleep(0)
        return text(args["msg"])

    reg = ToolRegistry([Capability(
        "echo", "e", Schema.build(required=["msg"], msg=FieldSpec(FieldKind.STRING)), slow_echo,
    )])
    assert run(invoke(reg, "echo", {"msg": "hi"})) == text("hi")


def test_timeout_becomes_execution_error():
    async def hang(args):
        await asyncio.sleep(5)

    reg = ToolRegistry([Capability("hang", "h", EMPTY_SCHEMA, hang)])
    result = run(Dispatcher(reg, timeout=0.05).invoke("hang"))
    assert result.kind is ErrorKind.EXECUTION
    assert "timed out" in result.message


def test_concurrent_invocations_are_independent():
    def sleepy(args):
        time.sleep(0.05)
        return text(str(args["n"]))

    reg = ToolRegistry([Capability(
        "sleepy", "s", Schema.build(required=["n"], n=FieldSpec(FieldKind.INTEGER)), sleepy,
    )]).freeze()
    dispatcher = Dispatcher(reg)

    async def fan_out():
        return await asyncio.gather(*(dispatcher.invoke("sleepy", {"n": i}) for i in range(8)))

    results = run(fan_out())
    assert [r.content[0].text for r in results] == [str(i) for i in range(8)]


def test_cancellation_propagates():
    async def scenario():
        gate = asyncio.Event()

        async def forever(args):
            gate.set()
            await asyncio.sleep(60)

        reg = ToolRegistry([Capability("forever", "f", EMPTY_SCHEMA, forever)])
        task = asyncio.ensure_future(Dispatcher(reg).invoke("forever"))
        await gate.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    run(scenario())


def test_outcomes_are_counted(plan_registry):
    before_ok = invocation_count("get_plan", "success")
    before_enum = invocation_count("get_plan", "InvalidEnumError")
    before_unknown = invocation_count(UNKNOWN_TOOL_LABEL, "ToolNotFound")

    run(invoke(plan_registry, "get_plan", {"level": "2"}))
    run(invoke(plan_registry, "get_plan", {"level": "3"}))
    run(invoke(plan_registry, "no_such_tool"))

    assert invocation_count("get_plan", "success") == before_ok + 1
    assert invocation_count("get_plan", "InvalidEnumError") == before_enum + 1
    assert invocation_count(UNKNOWN_TOOL_LABEL, "ToolNotFound") == before_unknown + 1
