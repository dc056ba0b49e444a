# llmbatch/core/runner.py

"""
Batch Runner.

Drives one run: load prompts, compute the shared prefix once, send each
prompt through the selected backend in input order, and append one encoded
record per prompt to the output sink.

States: IDLE -> PREPARING -> RUNNING -> COMPLETED | CANCELLED | FAILED

Per-prompt failures are written as records and never stop the batch.
Failures reading the prompts or writing the sink end the run in FAILED with
whatever records were already flushed. The sink is closed on every exit
path, and the prefix-aware backend's cache is cleared after every run.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, List, Optional

from llmbatch.core.errors import BackendUnavailableError
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PromptInput, common_prefix_length, split_prompt
from llmbatch.core.prompt_source import read_prompts
from llmbatch.core.record_encoder import OutputRecord
from llmbatch.core.retry import RetryPolicy, attempt_once
from llmbatch.llm.backends.base import AttemptResult, Backend

logger = setup_logger(__name__)

ProgressCallback = Callable[[int, int], None]
StateCallback = Callable[["RunState"], None]

UNAVAILABLE_REMEDIATION = (
    "The selected model is unavailable. Check that its service is installed "
    "and running (or that a valid API key was supplied), then retry."
)


class RunState(str, Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class CancellationToken:
    """
    Cooperative stop flag for a run.

    Set once from outside (signal handler, UI thread); read by the runner
    before each prompt. An in-flight backend call is allowed to finish.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def keep_running(self) -> bool:
        return not self._event.is_set()


@dataclass
class RunReport:
    """Terminal outcome of a run."""

    state: RunState
    total: int = 0
    written: int = 0
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is RunState.COMPLETED


class BatchRunner:
    """
    Sequential prompt dispatcher.

    :param backend: The opened backend; None means the selected model is unavailable
    :param retry_policy: Backoff policy for backends with ``supports_retry``
    :param progress_callback: Called with ``(current, total)`` before each backend call
    :param state_callback: Called with each RunState the runner enters
    :raises BackendUnavailableError: If ``backend`` is None
    """

    def __init__(
        self,
        backend: Optional[Backend],
        *,
        retry_policy: Optional[RetryPolicy] = None,
        progress_callback: Optional[ProgressCallback] = None,
        state_callback: Optional[StateCallback] = None,
    ) -> None:
        if backend is None:
            raise BackendUnavailableError(
                "Selected model unavailable", remediation=UNAVAILABLE_REMEDIATION
            )
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy()
        self._progress_callback = progress_callback
        self._state_callback = state_callback
        self.state = RunState.IDLE

    def _set_state(self, state: RunState) -> None:
        self.state = state
        logger.info("Run state: %s", state.value)
        if self._state_callback:
            self._state_callback(state)

    async def _dispatch(self, prompt: PromptInput) -> AttemptResult:
        if self.backend.supports_retry:
            return await self.retry_policy.execute(self.backend, prompt)
        return await attempt_once(self.backend, prompt)

    async def run(
        self,
        prompt_stream: BinaryIO,
        sink: BinaryIO,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RunReport:
        """
        Process every prompt of ``prompt_stream`` and append records to ``sink``.

        The runner takes ownership of ``sink`` and closes it before returning.

        :param prompt_stream: Binary stream with one UTF-8 prompt per line
        :param sink: Writable binary stream for the encoded records
        :param cancel_token: Checked before each prompt; cancellation ends the run
        :return: RunReport with the terminal state and record count
        """
        token = cancel_token or CancellationToken()
        report = RunReport(state=RunState.IDLE)

        try:
            self._set_state(RunState.PREPARING)
            prompts: List[str] = read_prompts(prompt_stream)
            report.total = len(prompts)

            prefix_length = 0
            if self.backend.supports_prefix:
                prefix_length = common_prefix_length(prompts)
                logger.info("Shared prefix across %d prompts: %d characters", len(prompts), prefix_length)

            self._set_state(RunState.RUNNING)
            for index, prompt in enumerate(prompts):
                if token.cancelled:
                    logger.info("Run cancelled after %d/%d prompts", report.written, report.total)
                    report.state = RunState.CANCELLED
                    break

                if self._progress_callback:
                    self._progress_callback(index + 1, report.total)

                request: PromptInput = (
                    split_prompt(prompt, prefix_length) if self.backend.supports_prefix else prompt
                )
                result = await self._dispatch(request)

                record = OutputRecord(prompt=prompt, response=result.text, elapsed_ms=result.elapsed_ms)
                sink.write(record.encode().encode("utf-8"))
                sink.flush()
                report.written += 1
            else:
                report.state = RunState.COMPLETED
        except Exception as e:
            logger.error("Run failed after %d records: %s", report.written, e, exc_info=True)
            report.state = RunState.FAILED
            report.error = str(e) or type(e).__name__
        finally:
            try:
                sink.close()
            except Exception as e:
                logger.error("Failed to close output sink: %s", e)
                if report.state is not RunState.FAILED:
                    report.state = RunState.FAILED
                    report.error = f"Failed to close output: {e}"
            if self.backend.supports_prefix:
                await self._clear_backend_cache()

        self._set_state(report.state)
        logger.info(
            "Run finished: %s (%d/%d records written)", report.state.value, report.written, report.total
        )
        return report

    async def _clear_backend_cache(self) -> None:
        try:
            await self.backend.clear_cache()
        except Exception as e:
            logger.warning("Failed to clear backend cache: %s", e)
