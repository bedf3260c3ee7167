"""Resilient call adapter for one reasoning provider.

ProviderAdapter turns a CallRequest into a CallResult by combining:

1. **Transport**: one HTTP call per attempt, under a fresh per-attempt deadline
2. **Dialect**: vendor-specific request body and response parsing
3. **FailureClassifier**: labels every failed attempt
4. **RetryPolicy**: decides whether to retry and how long to back off
5. **Telemetry**: one event per attempt outcome, delivered off the call path

Cancellation:
    ``call()`` accepts an optional ``asyncio.Event``. Setting it aborts the
    in-flight transport call (recorded as a ``Cancelled`` attempt) or skips
    the pending backoff sleep, and the call ends with CallCancelled instead
    of moving on to the next attempt.
    Per-attempt deadlines are independent of this signal: an attempt that
    runs out of time is a retryable Timeout.

Usage:
    adapter = ProviderAdapter(config)
    result = await adapter.call(CallRequest(prompt="Summarise this ..."))
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone

from reasoning_gateway.config import ProviderConfig
from reasoning_gateway.errors import (
    CallCancelled,
    InvalidRequest,
    MalformedResponse,
    ProviderCallFailed,
)
from reasoning_gateway.providers import plugin_loader
from reasoning_gateway.providers.base import ProviderDialect
from reasoning_gateway.providers.resilience import RetryPolicy, classify
from reasoning_gateway.providers.transport import HttpxTransport, Transport, TransportResponse
from reasoning_gateway.telemetry import TelemetryDispatcher, TelemetrySink, estimate_cost
from reasoning_gateway.types import (
    CANCELLED,
    EXHAUSTED_RETRIES,
    SUCCESS,
    AttemptRecord,
    CallRequest,
    CallResult,
    FailureLabel,
    TelemetryEvent,
    TokenUsage,
)

logger = logging.getLogger(__name__)

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
_DETAIL_LIMIT = 200


class _AttemptCancelled(Exception):
    """Cancel signal fired while a transport call was in flight."""


class ProviderAdapter:
    """Invokes one provider with timeouts, retries and telemetry.

    Adapters hold no per-call state, so one instance serves any number of
    concurrent calls.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: Transport | None = None,
        dialect: ProviderDialect | None = None,
        retry_policy: RetryPolicy | None = None,
        telemetry: TelemetrySink | None = None,
    ):
        """Initialize adapter.

        Args:
            config: Provider configuration (credential, model, retry budget)
            transport: HTTP transport (default: pooled HttpxTransport)
            dialect: Wire schema (default: resolved from ``config.dialect``)
            retry_policy: Retry policy (default: built from config backoff settings)
            telemetry: Sink for per-attempt events (default: none). Events are
                delivered on a background thread; see ``flush_telemetry()``

        Raises:
            ValueError: If the configured dialect is unknown
        """
        self.config = config
        self.dialect = dialect or plugin_loader.create_dialect(config.dialect)
        self.transport = transport or HttpxTransport()
        self.retry_policy = retry_policy or RetryPolicy(
            max_interval=config.max_backoff_ms / 1000,
            jitter=config.backoff_jitter
        )
        self.telemetry = telemetry
        self._dispatcher = TelemetryDispatcher(telemetry) if telemetry is not None else None

        logger.debug(
            f"Initialized ProviderAdapter: provider={config.provider_id}, "
            f"model={config.model}, dialect={self.dialect.get_name()}, "
            f"timeout={config.timeout_ms}ms, max_retries={config.max_retries}"
        )

    @property
    def provider_id(self) -> str:
        return self.config.provider_id

    @property
    def model(self) -> str:
        return self.config.model

    def validate_request(self, request: CallRequest) -> None:
        """Reject requests that no provider could serve.

        Raises:
            InvalidRequest: On empty prompt or out-of-range parameters
        """
        if not isinstance(request.prompt, str) or not request.prompt.strip():
            raise InvalidRequest("prompt must not be empty", self.provider_id, field="prompt")

        temperature = request.temperature
        if (
            isinstance(temperature, bool)
            or not isinstance(temperature, (int, float))
            or not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE
        ):
            raise InvalidRequest(
                f"temperature must be within [{MIN_TEMPERATURE}, {MAX_TEMPERATURE}], got {temperature!r}",
                self.provider_id,
                field="temperature",
            )

        for name in ("max_tokens", "timeout_ms", "max_retries", "base_backoff_ms"):
            value = getattr(request, name)
            if value is None and name != "max_tokens":
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidRequest(
                    f"{name} must be a positive integer, got {value!r}",
                    self.provider_id,
                    field=name,
                )

    async def call(self, request: CallRequest, cancel: asyncio.Event | None = None) -> CallResult:
        """Run one resilient call.

        Args:
            request: The call to make
            cancel: Optional external cancellation signal

        Returns:
            CallResult from the first successful attempt

        Raises:
            InvalidRequest: Request failed validation (no attempt made)
            ProviderCallFailed: Non-retryable failure or attempts exhausted
            CallCancelled: ``cancel`` was set before the call finished
        """
        self.validate_request(request)

        model = request.model or self.config.model
        timeout = (request.timeout_ms or self.config.timeout_ms) / 1000
        max_retries = request.max_retries or self.config.max_retries
        base_backoff = (request.base_backoff_ms or self.config.base_backoff_ms) / 1000

        endpoint = self.dialect.endpoint(self.config.base_url)
        headers = self.dialect.headers(self.config.credential)
        body = self.dialect.build_body(request, model)

        request_id = uuid.uuid4().hex[:8]
        call_started = time.monotonic()
        attempts: list[AttemptRecord] = []
        last_label: FailureLabel | None = None
        last_error: BaseException | None = None

        for attempt_index in range(max_retries):
            if cancel is not None and cancel.is_set():
                logger.info(f"[{request_id}] {self.provider_id} call cancelled before attempt {attempt_index + 1}")
                raise CallCancelled(self.provider_id, tuple(attempts))

            logger.debug(f"[{request_id}] {self.provider_id} attempt {attempt_index + 1}/{max_retries}")
            started_at = datetime.now(timezone.utc)
            attempt_started = time.monotonic()

            outcome: object
            try:
                response = await self._send(endpoint, headers, body, timeout, cancel)
            except _AttemptCancelled:
                latency = time.monotonic() - attempt_started
                attempts.append(AttemptRecord(attempt_index, started_at, CANCELLED, latency))
                self._emit(model, attempt_index, CANCELLED, latency)
                logger.info(
                    f"[{request_id}] {self.provider_id} call cancelled during "
                    f"attempt {attempt_index + 1}/{max_retries}"
                )
                raise CallCancelled(self.provider_id, tuple(attempts)) from None
            except Exception as e:
                outcome = e
            else:
                if response.ok:
                    try:
                        content, usage = self.dialect.parse_response(response.body)
                    except MalformedResponse as e:
                        outcome = e
                    else:
                        latency = time.monotonic() - attempt_started
                        attempts.append(AttemptRecord(attempt_index, started_at, SUCCESS, latency))
                        return self._succeed(
                            request_id, model, content, usage, attempts, max_retries, call_started
                        )
                else:
                    outcome = response

            latency = time.monotonic() - attempt_started
            label = classify(outcome)
            detail = _describe(outcome)
            attempts.append(AttemptRecord(attempt_index, started_at, label.value, latency, detail))
            self._emit(model, attempt_index, label.value, latency)
            last_label = label
            last_error = outcome if isinstance(outcome, BaseException) else None

            if not self.retry_policy.should_retry(label, attempt_index, max_retries):
                terminal = EXHAUSTED_RETRIES if label.retryable else label.value
                logger.error(
                    f"[{request_id}] {self.provider_id} call failed ({terminal}) after "
                    f"{len(attempts)}/{max_retries} attempts: {detail}"
                )
                raise ProviderCallFailed(self.provider_id, terminal, label, tuple(attempts)) from last_error

            delay = self.retry_policy.backoff_duration(attempt_index, base_backoff)
            logger.info(
                f"[{request_id}] {self.provider_id} attempt {attempt_index + 1}/{max_retries} "
                f"failed ({label.value}): {detail}. Retrying in {delay:.2f}s..."
            )
            if not await self._backoff(delay, cancel):
                logger.info(f"[{request_id}] {self.provider_id} call cancelled during backoff")
                raise CallCancelled(self.provider_id, tuple(attempts))

        # Only reachable if the retry policy allows more attempts than max_retries
        raise ProviderCallFailed(
            self.provider_id, EXHAUSTED_RETRIES, last_label or FailureLabel.SERVER_ERROR, tuple(attempts)
        ) from last_error

    def _succeed(
        self,
        request_id: str,
        model: str,
        content: str,
        usage: TokenUsage,
        attempts: list[AttemptRecord],
        max_retries: int,
        call_started: float,
    ) -> CallResult:
        record = attempts[-1]
        cost = estimate_cost(usage.total_tokens, self.config.cost_per_1k_tokens)
        self._emit(model, record.attempt_index, SUCCESS, record.latency, usage, cost)

        logger.info(
            f"[{request_id}] {self.provider_id} call succeeded on attempt "
            f"{record.attempt_index + 1}/{max_retries}: model={model}, "
            f"prompt_tokens={usage.prompt_tokens}, completion_tokens={usage.completion_tokens}, "
            f"total_tokens={usage.total_tokens}, cost=~${cost}"
        )
        return CallResult(
            content=content,
            usage=usage,
            attempt_count=len(attempts),
            elapsed=time.monotonic() - call_started,
            provider_id=self.provider_id,
            model=model,
            attempts=tuple(attempts),
        )

    async def _send(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: bytes,
        timeout: float,
        cancel: asyncio.Event | None,
    ) -> TransportResponse:
        """Run one transport call under ``timeout``, racing the cancel signal."""
        send = self.transport.send(endpoint, headers, body, timeout)
        if cancel is None:
            return await asyncio.wait_for(send, timeout)

        send_task = asyncio.ensure_future(send)
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (send_task, cancel_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(send_task, cancel_task, return_exceptions=True)

        if send_task in done:
            return send_task.result()
        if cancel_task in done:
            raise _AttemptCancelled()
        raise asyncio.TimeoutError(f"attempt exceeded {timeout:.1f}s deadline")

    async def _backoff(self, delay: float, cancel: asyncio.Event | None) -> bool:
        """Sleep before the next attempt. Returns False if cancelled."""
        if cancel is None:
            await asyncio.sleep(delay)
            return True
        try:
            await asyncio.wait_for(cancel.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return True
        return False

    def _emit(
        self,
        model: str,
        attempt_index: int,
        outcome: str,
        latency: float,
        usage: TokenUsage | None = None,
        cost: float | None = None,
    ) -> None:
        if self._dispatcher is None:
            return
        self._dispatcher.submit(TelemetryEvent(
            provider_id=self.provider_id,
            model=model,
            attempt_index=attempt_index,
            outcome=outcome,
            latency_ms=latency * 1000,
            usage=usage,
            estimated_cost_usd=cost,
        ))

    async def flush_telemetry(self, timeout: float | None = 5.0) -> bool:
        """Wait until every telemetry event emitted so far reached the sink.

        Returns:
            False if the timeout expired first
        """
        if self._dispatcher is None:
            return True
        return await asyncio.to_thread(self._dispatcher.flush, timeout)

    async def aclose(self) -> None:
        """Close the underlying transport and drain pending telemetry."""
        try:
            await self.transport.aclose()
        finally:
            if self._dispatcher is not None:
                await asyncio.to_thread(self._dispatcher.close)

    def __repr__(self) -> str:
        return f"ProviderAdapter(provider_id={self.provider_id!r}, model={self.model!r})"


def _describe(outcome: object) -> str:
    """Short human-readable description of a failed attempt."""
    if isinstance(outcome, TransportResponse):
        text = outcome.body[:_DETAIL_LIMIT].decode("utf-8", errors="replace")
        return f"HTTP {outcome.status_code}: {text}" if text else f"HTTP {outcome.status_code}"
    if isinstance(outcome, BaseException):
        message = str(outcome)[:_DETAIL_LIMIT]
        return f"{type(outcome).__name__}: {message}" if message else type(outcome).__name__
    return repr(outcome)[:_DETAIL_LIMIT]
