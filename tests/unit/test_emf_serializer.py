"""Tests for the EMF batch serializer."""

import json
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from emfkit.core.config import Configuration
from emfkit.core.context import MetricsContext
from emfkit.core.encoding.emf import LogSerializer, serialize
from emfkit.core.models import StorageResolution, Unit

pytestmark = [pytest.mark.encoding, pytest.mark.tier(0)]


def _parse(events: list[str]) -> list[dict[str, Any]]:
    return [json.loads(event) for event in events]


def _directive(payload: dict[str, Any]) -> dict[str, Any]:
    directive: dict[str, Any] = payload["_aws"]["CloudWatchMetrics"][0]
    return directive


def _metric_names(payload: dict[str, Any]) -> list[str]:
    return [definition["Name"] for definition in _directive(payload)["Metrics"]]


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else [value]


class TestEnvelope:
    """Tests for the shape of a single payload."""

    @pytest.mark.tra("Encoding.EMF.Envelope")
    def test_payload_layout(self, context: MetricsContext) -> None:
        context.set_namespace("Shop")
        context.put_dimensions({"Operation": "Checkout"})
        context.set_property("RequestId", "r-1")
        context.put_metric("Latency", 12.5, Unit.MILLISECONDS)

        [payload] = _parse(serialize(context))

        assert payload["Operation"] == "Checkout"
        assert payload["RequestId"] == "r-1"
        assert payload["Latency"] == 12.5
        assert payload["_aws"]["Timestamp"] == context.meta["Timestamp"]
        assert payload["_aws"]["CloudWatchMetrics"] == [
            {
                "Dimensions": [["Operation"]],
                "Metrics": [{"Name": "Latency", "Unit": "Milliseconds"}],
                "Namespace": "Shop",
            }
        ]

    @pytest.mark.tra("Encoding.EMF.NewlineFree")
    def test_payloads_are_single_lines(self, context: MetricsContext) -> None:
        context.set_property("Note", "multi\nline")
        context.put_metric("m", 1)
        for event in serialize(context):
            assert "\n" not in event

    @pytest.mark.tra("Encoding.EMF.Empty")
    def test_empty_context_yields_one_payload(self, context: MetricsContext) -> None:
        context.set_property("Key", "value")
        events = serialize(context)
        assert len(events) == 1
        payload = json.loads(events[0])
        assert _directive(payload)["Metrics"] == []
        assert set(payload) == {"Key", "_aws"}

    @pytest.mark.tra("Encoding.EMF.LogGroup")
    def test_log_group_only_when_non_empty(self, context: MetricsContext) -> None:
        context.meta["LogGroupName"] = ""
        [payload] = _parse(serialize(context))
        assert "LogGroupName" not in payload["_aws"]

        context.meta["LogGroupName"] = "my-group"
        context.meta["LogStreamName"] = "my-stream"
        [payload] = _parse(serialize(context))
        assert payload["_aws"]["LogGroupName"] == "my-group"
        assert payload["_aws"]["LogStreamName"] == "my-stream"

    def test_explicit_timestamp_is_emitted(self, context: MetricsContext) -> None:
        moment = datetime.now(timezone.utc) - timedelta(minutes=10)
        context.set_timestamp(moment)
        [payload] = _parse(serialize(context))
        assert payload["_aws"]["Timestamp"] == int(moment.timestamp() * 1000)

    @pytest.mark.tra("Encoding.EMF.DefaultDimensions")
    def test_default_dimensions_are_merged(self, context: MetricsContext) -> None:
        context.set_default_dimensions({"Service": "api"})
        context.put_dimensions({"Operation": "Get"})
        context.put_dimensions({"Region": "eu"})
        [payload] = _parse(serialize(context))
        assert _directive(payload)["Dimensions"] == [
            ["Service", "Operation"],
            ["Service", "Region"],
        ]
        assert payload["Service"] == "api"
        assert payload["Operation"] == "Get"
        assert payload["Region"] == "eu"

    @pytest.mark.tra("Encoding.EMF.HighResolution")
    def test_high_resolution_definition(self, context: MetricsContext) -> None:
        context.put_metric("Fast", 1, Unit.COUNT, StorageResolution.HIGH)
        context.put_metric("Slow", 1, Unit.COUNT)
        [payload] = _parse(serialize(context))
        assert _directive(payload)["Metrics"] == [
            {"Name": "Fast", "Unit": "Count", "StorageResolution": 1},
            {"Name": "Slow", "Unit": "Count"},
        ]

    @pytest.mark.tra("Encoding.EMF.DimensionTruncation")
    def test_dimension_names_are_truncated(self, context: MetricsContext) -> None:
        context.put_dimensions({f"d{i}": "v" for i in range(15)})
        [payload] = _parse(serialize(context))
        assert _directive(payload)["Dimensions"] == [[f"d{i}" for i in range(10)]]
        # Values are still carried for every stored dimension.
        assert payload["d14"] == "v"

    def test_custom_truncation(self, context: MetricsContext) -> None:
        context.put_dimensions({f"d{i}": "v" for i in range(15)})
        [payload] = _parse(LogSerializer(max_dimensions_per_set=30).serialize(context))
        assert len(_directive(payload)["Dimensions"][0]) == 15

    @pytest.mark.tra("Encoding.EMF.ExtractionDisabled")
    def test_disabled_extraction_omits_directive(self) -> None:
        context = MetricsContext.empty(
            config=Configuration(disable_metric_extraction=True)
        )
        context.put_dimensions({"Operation": "Get"})
        context.put_metric("m", 1)
        [payload] = _parse(serialize(context))
        assert payload == {"Operation": "Get", "m": 1}


class TestValueUnwrapping:
    """Tests for single-sample unwrapping."""

    @pytest.mark.tra("Encoding.EMF.Unwrap")
    def test_single_value_is_scalar(self, context: MetricsContext) -> None:
        context.put_metric("one", 7)
        [payload] = _parse(serialize(context))
        assert payload["one"] == 7

    def test_multiple_values_are_list(self, context: MetricsContext) -> None:
        context.put_metric("two", 1)
        context.put_metric("two", 2)
        [payload] = _parse(serialize(context))
        assert payload["two"] == [1, 2]


class TestBatching:
    """Tests for splitting large contexts across payloads."""

    @pytest.mark.tra("Encoding.EMF.Batching.MetricCount")
    def test_275_single_value_metrics(self, context: MetricsContext) -> None:
        for i in range(275):
            context.put_metric(f"metric-{i}", i)

        payloads = _parse(serialize(context))

        assert [len(_metric_names(p)) for p in payloads] == [100, 100, 75]
        emitted = [name for p in payloads for name in _metric_names(p)]
        assert sorted(emitted) == sorted(f"metric-{i}" for i in range(275))
        for payload in payloads:
            for name in _metric_names(payload):
                assert payload[name] == int(name.split("-")[1])

    def test_exactly_100_metrics_fit_one_payload(self, context: MetricsContext) -> None:
        for i in range(100):
            context.put_metric(f"m{i}", i)
        assert len(serialize(context)) == 1

    @pytest.mark.tra("Encoding.EMF.Batching.ValueCount")
    def test_250_values_split_in_order(self, context: MetricsContext) -> None:
        for i in range(250):
            context.put_metric("big", i)

        payloads = _parse(serialize(context))

        assert len(payloads) == 3
        chunks = [p["big"] for p in payloads]
        assert [len(c) for c in chunks] == [100, 100, 50]
        assert [v for chunk in chunks for v in chunk] == list(range(250))
        for payload in payloads:
            assert _metric_names(payload) == ["big"]

    def test_101_values_keep_list_for_last_chunk(self, context: MetricsContext) -> None:
        for i in range(101):
            context.put_metric("big", i)
        payloads = _parse(serialize(context))
        assert payloads[1]["big"] == [100]

    @pytest.mark.tra("Encoding.EMF.Batching.Mixed")
    def test_large_metric_shares_payloads_with_small_ones(
        self, context: MetricsContext
    ) -> None:
        for i in range(150):
            context.put_metric("big", i)
        context.put_metric("small", 1)

        payloads = _parse(serialize(context))

        assert len(payloads) == 2
        assert _metric_names(payloads[0]) == ["big", "small"]
        assert payloads[0]["big"] == list(range(100))
        assert payloads[1]["big"] == list(range(100, 150))
        assert "small" not in payloads[1]

    def test_metric_never_repeats_within_payload(self, context: MetricsContext) -> None:
        for i in range(350):
            context.put_metric("a", i)
        for i in range(120):
            context.put_metric("b", i)
        for payload in _parse(serialize(context)):
            names = _metric_names(payload)
            assert len(names) == len(set(names))

    def test_every_payload_repeats_shared_fields(self, context: MetricsContext) -> None:
        context.set_namespace("Shop")
        context.put_dimensions({"Operation": "Get"})
        context.set_property("RequestId", "r-1")
        for i in range(250):
            context.put_metric(f"m{i}", i)
        for payload in _parse(serialize(context)):
            assert payload["Operation"] == "Get"
            assert payload["RequestId"] == "r-1"
            assert _directive(payload)["Namespace"] == "Shop"
            assert _directive(payload)["Dimensions"] == [["Operation"]]

    def test_serializing_does_not_mutate_context(self, context: MetricsContext) -> None:
        for i in range(150):
            context.put_metric("big", i)
        serialize(context)
        assert context.metrics["big"].values == list(range(150))


@st.composite
def _metric_samples(draw: st.DrawFn) -> dict[str, list[int]]:
    count = draw(st.integers(min_value=0, max_value=40))
    samples: dict[str, list[int]] = {}
    for i in range(count):
        samples[f"m{i}"] = draw(
            st.lists(st.integers(-1000, 1000), min_size=1, max_size=260)
        )
    return samples


class TestBatchingProperties:
    """Property-based checks for batch limits and sample order."""

    @settings(max_examples=50, deadline=None)
    @given(samples=_metric_samples(), max_metrics=st.integers(1, 15))
    @pytest.mark.tra("Encoding.EMF.Batching.RoundTrip")
    def test_values_recovered_in_order_within_limits(
        self, samples: dict[str, list[int]], max_metrics: int
    ) -> None:
        context = MetricsContext.empty(config=Configuration())
        for name, values in samples.items():
            for value in values:
                context.put_metric(name, value)
        serializer = LogSerializer(max_metrics_per_event=max_metrics)

        payloads = _parse(serializer.serialize(context))

        recovered: dict[str, list[int]] = {}
        for payload in payloads:
            names = _metric_names(payload)
            assert len(names) <= max_metrics
            assert len(names) == len(set(names))
            for name in names:
                values = _as_list(payload[name])
                assert len(values) <= 100
                recovered.setdefault(name, []).extend(values)
        assert recovered == samples
        if not samples:
            assert len(payloads) == 1
