# llmbatch/core/retry.py

"""
Dispatch of a single prompt to a backend.

On-device backends report transient overload with ``BackendBusyError``. Those
attempts are repeated after an exponentially growing wait (100 ms, 200 ms,
400 ms, ...) that restarts for every prompt. By default there is no ceiling
on the wait and no limit on the number of attempts: a service that stays busy
stalls the run until it recovers or the process is interrupted. Optional
caps can be configured in ``retry_config.yaml``.

Any other failure is terminal and becomes an ``Error: <message>`` result with
zero duration.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_exponential,
)

from llmbatch.config.manager import RetrySettings
from llmbatch.core.errors import BackendBusyError
from llmbatch.core.logger import setup_logger
from llmbatch.core.prefix import PromptInput
from llmbatch.llm.backends.base import AttemptResult, Backend

logger = setup_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _log_busy(retry_state: RetryCallState) -> None:
    wait_s = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "Backend busy (attempt %d); retrying in %d ms",
        retry_state.attempt_number,
        int(round(wait_s * 1000)),
    )


class RetryPolicy:
    """
    Exponential backoff on busy failures for on-device backends.

    :param settings: Wait and optional cap settings; defaults are 100 ms, uncapped
    :param sleep: Awaitable sleep used between attempts (``asyncio.sleep``)
    """

    def __init__(
        self,
        settings: Optional[RetrySettings] = None,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        self.settings = settings or RetrySettings()
        self._sleep: SleepFunc = sleep or asyncio.sleep
        if self.settings.max_wait_ms is not None or self.settings.max_attempts is not None:
            logger.info(
                "Busy retry capped (max_wait_ms=%s, max_attempts=%s)",
                self.settings.max_wait_ms,
                self.settings.max_attempts,
            )

    def _retrying(self) -> AsyncRetrying:
        initial_s = self.settings.initial_wait_ms / 1000.0
        wait_kwargs = {"multiplier": initial_s, "exp_base": 2, "min": 0}
        if self.settings.max_wait_ms is not None:
            wait_kwargs["max"] = self.settings.max_wait_ms / 1000.0
        stop = (
            stop_after_attempt(self.settings.max_attempts)
            if self.settings.max_attempts is not None
            else stop_never
        )
        return AsyncRetrying(
            retry=retry_if_exception_type(BackendBusyError),
            wait=wait_exponential(**wait_kwargs),
            stop=stop,
            sleep=self._sleep,
            before_sleep=_log_busy,
            reraise=True,
        )

    async def execute(self, backend: Backend, prompt: PromptInput) -> AttemptResult:
        """
        Run one prompt to a terminal result.

        :return: The backend's result, or ``Error: <message>`` with 0 ms
        """
        try:
            return await self._retrying()(backend.complete, prompt)
        except BackendBusyError as e:
            # only reachable when max_attempts is configured
            logger.error("Backend still busy after %s attempts: %s", self.settings.max_attempts, e)
            return AttemptResult.failure(_error_message(e))
        except Exception as e:
            logger.error("Prompt failed: %s", _error_message(e))
            return AttemptResult.failure(_error_message(e))


async def attempt_once(backend: Backend, prompt: PromptInput) -> AttemptResult:
    """
    Single attempt without retry, used for the cloud backend.

    :return: The backend's result, or ``Error: <message>`` with 0 ms
    """
    try:
        return await backend.complete(prompt)
    except Exception as e:
        logger.error("Prompt failed on %s: %s", backend.identifier, _error_message(e))
        return AttemptResult.failure(_error_message(e))
