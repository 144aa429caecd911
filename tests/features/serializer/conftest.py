"""BDD step definitions for serializer batching features."""

import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from emfkit.core.config import Configuration
from emfkit.core.context import MetricsContext
from emfkit.core.encoding.emf import LogSerializer


@dataclass
class SerializerScenarioContext:
    """State shared between the steps of one scenario."""

    context: MetricsContext = field(
        default_factory=lambda: MetricsContext.empty(config=Configuration())
    )
    expected: dict[str, list[int]] = field(default_factory=dict)
    payloads: list[dict[str, Any]] = field(default_factory=list)


def _metric_names(payload: dict[str, Any]) -> list[str]:
    directive = payload["_aws"]["CloudWatchMetrics"][0]
    return [definition["Name"] for definition in directive["Metrics"]]


@pytest.fixture
def ctx() -> SerializerScenarioContext:
    """Fresh scenario context for each test."""
    return SerializerScenarioContext()


@given("an empty metrics context")
def given_empty_context(ctx: SerializerScenarioContext) -> None:
    """Start from a context with no metrics."""


@given(parsers.parse("{n:d} metrics with one value each"))
def given_single_value_metrics(ctx: SerializerScenarioContext, n: int) -> None:
    for i in range(n):
        ctx.context.put_metric(f"metric-{i}", i)
        ctx.expected[f"metric-{i}"] = [i]


@given(parsers.parse('a metric "{name}" with {n:d} values'))
def given_metric_with_values(
    ctx: SerializerScenarioContext, name: str, n: int
) -> None:
    for i in range(n):
        ctx.context.put_metric(name, i)
    ctx.expected[name] = list(range(n))


@given(parsers.parse('the dimension "{key}" set to "{value}"'))
def given_dimension(ctx: SerializerScenarioContext, key: str, value: str) -> None:
    ctx.context.put_dimensions({key: value})


@given(parsers.parse('the property "{key}" set to "{value}"'))
def given_property(ctx: SerializerScenarioContext, key: str, value: str) -> None:
    ctx.context.set_property(key, value)


@when("the context is serialized")
def when_serialized(ctx: SerializerScenarioContext) -> None:
    ctx.payloads = [json.loads(e) for e in LogSerializer().serialize(ctx.context)]


@then(parsers.re(r"(?P<n>\d+) payloads? (is|are) produced"))
def then_payload_count(ctx: SerializerScenarioContext, n: str) -> None:
    assert len(ctx.payloads) == int(n)


@then(parsers.parse("payload {index:d} defines {n:d} metrics"))
def then_payload_defines(
    ctx: SerializerScenarioContext, index: int, n: int
) -> None:
    assert len(_metric_names(ctx.payloads[index - 1])) == n


@then(parsers.parse("the payloads define {first:d}, {second:d} and {third:d} metrics"))
def then_payloads_define(
    ctx: SerializerScenarioContext, first: int, second: int, third: int
) -> None:
    assert [len(_metric_names(p)) for p in ctx.payloads] == [first, second, third]


@then(parsers.parse('the values of "{name}" are recovered in order'))
def then_values_recovered(ctx: SerializerScenarioContext, name: str) -> None:
    recovered: list[int] = []
    for payload in ctx.payloads:
        value = payload[name]
        recovered.extend(value if isinstance(value, list) else [value])
        assert len(_metric_names(payload)) == 1
    assert recovered == ctx.expected[name]


@then(parsers.parse('payload {index:d} holds "{name}" as a scalar'))
def then_scalar(ctx: SerializerScenarioContext, index: int, name: str) -> None:
    assert ctx.payloads[index - 1][name] == ctx.expected[name][0]


@then(parsers.parse('every payload carries "{key}" as "{value}"'))
def then_every_payload_carries(
    ctx: SerializerScenarioContext, key: str, value: str
) -> None:
    assert all(payload[key] == value for payload in ctx.payloads)
