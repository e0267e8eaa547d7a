"""ModelGateway tests with a fake client (no network)."""
import asyncio

import pytest

from credit_pipeline.cancellation import CancellationToken
from credit_pipeline.llm.errors import ErrorKind, GatewayError
from credit_pipeline.llm.gateway import ModelGateway
from credit_pipeline.llm.settings import LLMSettings
from credit_pipeline.llm.telemetry import CallMetric
from credit_pipeline.llm.types import LLMMessage, LLMRequest, LLMResponse


class FakeClient:
    def __init__(self, *, text: str = "{}", error: Exception | None = None, delay_s: float = 0.0) -> None:
        self.text = text
        self.error = error
        self.delay_s = delay_s
        self.calls: list[tuple[str, LLMRequest, float]] = []

    async def acompletion(self, model, req, *, timeout_s, api_base=None, api_key=None):
        self.calls.append((model, req, timeout_s))
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.error is not None:
            raise self.error
        return LLMResponse(text=self.text, model=model, latency_ms=1)


class ListSink:
    def __init__(self) -> None:
        self.metrics: list[CallMetric] = []

    def record(self, metric: CallMetric) -> None:
        self.metrics.append(metric)


def _req(**kw) -> LLMRequest:
    return LLMRequest(messages=[LLMMessage(role="user", content="Hi")], **kw)


async def _drain_executor() -> None:
    # Sinks run in the default executor; give the callbacks a chance to finish.
    for _ in range(20):
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_complete_fills_defaults_and_emits_success_metric() -> None:
    client = FakeClient(text='{"ok": true}')
    sink = ListSink()
    gw = ModelGateway(LLMSettings(model="test-model", api_key="k"), client=client, telemetry=sink)
    resp = await gw.complete(_req())
    assert resp.text == '{"ok": true}'
    assert resp.request_id
    model, sent, timeout_s = client.calls[0]
    assert model == "test-model"
    assert sent.temperature == 0.3
    assert sent.max_output_tokens == 4000
    assert timeout_s == 120.0
    await _drain_executor()
    assert len(sink.metrics) == 1
    assert sink.metrics[0].success is True
    assert sink.metrics[0].request_id == resp.request_id


@pytest.mark.asyncio
async def test_request_overrides_win() -> None:
    client = FakeClient()
    gw = ModelGateway(LLMSettings(api_key="k"), client=client)
    await gw.complete(_req(model="other", temperature=0.0, max_output_tokens=10, timeout_s=5))
    model, sent, timeout_s = client.calls[0]
    assert model == "other"
    assert sent.temperature == 0.0
    assert sent.max_output_tokens == 10
    assert timeout_s == 5


@pytest.mark.asyncio
async def test_provider_error_is_classified_once_and_not_retried() -> None:
    class AuthenticationError(Exception):
        pass

    client = FakeClient(error=AuthenticationError("Incorrect API key"))
    sink = ListSink()
    gw = ModelGateway(LLMSettings(api_key="k"), client=client, telemetry=sink)
    with pytest.raises(GatewayError) as ei:
        await gw.complete(_req())
    assert ei.value.kind is ErrorKind.AUTHENTICATION
    assert ei.value.retryable is False
    assert len(client.calls) == 1
    await _drain_executor()
    assert sink.metrics[0].success is False
    assert sink.metrics[0].error_type == "authentication"


@pytest.mark.asyncio
async def test_hard_timeout_maps_to_timeout() -> None:
    client = FakeClient(delay_s=5.0)
    gw = ModelGateway(LLMSettings(api_key="k"), client=client)
    with pytest.raises(GatewayError) as ei:
        await gw.complete(_req(timeout_s=0.05))
    assert ei.value.kind is ErrorKind.TIMEOUT
    assert ei.value.retryable is True


@pytest.mark.asyncio
async def test_cancellation_aborts_pending_call() -> None:
    client = FakeClient(delay_s=5.0)
    gw = ModelGateway(LLMSettings(api_key="k"), client=client)
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    loop.call_later(0.05, token.cancel)
    t0 = loop.time()
    with pytest.raises(GatewayError) as ei:
        await gw.complete(_req(), cancel=token)
    assert ei.value.kind is ErrorKind.CANCELLED
    assert ei.value.retryable is False
    assert loop.time() - t0 < 1.0


@pytest.mark.asyncio
async def test_sink_failure_does_not_affect_result() -> None:
    class BrokenSink:
        def record(self, metric: CallMetric) -> None:
            raise RuntimeError("sink down")

    gw = ModelGateway(LLMSettings(api_key="k"), client=FakeClient(text="x"), telemetry=BrokenSink())
    resp = await gw.complete(_req())
    assert resp.text == "x"
    await _drain_executor()


@pytest.mark.asyncio
async def test_already_cancelled_token_never_starts_a_call() -> None:
    class CountingClient:
        def __init__(self) -> None:
            self.created = 0

        def acompletion(self, model, req, *, timeout_s, api_base=None, api_key=None):
            self.created += 1
            return self._reply(model)

        async def _reply(self, model):
            return LLMResponse(text="{}", model=model, latency_ms=1)

    client = CountingClient()
    sink = ListSink()
    gw = ModelGateway(LLMSettings(api_key="k"), client=client, telemetry=sink)
    token = CancellationToken()
    token.cancel("upload aborted")
    with pytest.raises(GatewayError) as ei:
        await gw.complete(_req(), cancel=token)
    assert ei.value.kind is ErrorKind.CANCELLED
    assert client.created == 0
    await _drain_executor()
    assert [m.error_type for m in sink.metrics] == ["cancelled"]
