# llmbatch/cli/batch_command.py

"""
Batch command: run a prompt file through one backend and write the results.

Workflow:
 1. Resolve the input file, the output file and the backend identifier.
 2. Build and open the backend (the Gemini backend needs an API key).
 3. Run the BatchRunner with console progress and Ctrl-C cancellation.
 4. Report the terminal state; exit 0 completed, 130 cancelled, 1 otherwise.
"""

import asyncio
import os
import signal
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Optional

from llmbatch.cli.args_parser import (
    create_run_parser,
    default_output_path,
    resolve_path,
    validate_input_path,
)
from llmbatch.cli.execution_framework import BatchScript
from llmbatch.core.errors import BackendUnavailableError, ConfigValidationError
from llmbatch.core.retry import RetryPolicy
from llmbatch.core.runner import BatchRunner, CancellationToken, RunReport, RunState
from llmbatch.llm.backends.base import BackendId
from llmbatch.llm.backends.factory import create_backend, parse_backend_id, remediation_for

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CANCELLED = 130


def _install_cancel_handlers(token: CancellationToken) -> None:
    """Route SIGINT/SIGTERM to the cancellation token."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, token.cancel)
        except (NotImplementedError, RuntimeError, ValueError):
            # add_signal_handler is unavailable on Windows event loops
            signal.signal(sig, lambda *_: token.cancel())


class RunBatchScript(BatchScript):
    """Command-line front end for the BatchRunner."""

    def __init__(self) -> None:
        super().__init__("run_batch")

    def create_argument_parser(self) -> ArgumentParser:
        return create_run_parser()

    def _resolve_backend_id(self, args: Namespace) -> str:
        identifier = args.backend or self.config_manager.get_default_backend()
        if not identifier:
            raise ConfigValidationError(
                "No backend selected. Pass --backend or set general.default_backend in paths_config.yaml."
            )
        return str(identifier)

    def _resolve_api_key(self, args: Namespace, identifier: str) -> Optional[str]:
        if parse_backend_id(identifier) is not BackendId.GEMINI:
            return None
        api_key = (args.api_key or os.getenv("GOOGLE_API_KEY", "")).strip()
        return api_key or None

    def run_cli(self, args: Namespace) -> int:
        input_path = resolve_path(args.input)
        validate_input_path(input_path)

        if args.output:
            output_path = resolve_path(args.output)
        else:
            output_path = default_output_path(input_path, self.config_manager.get_output_dir())

        identifier = self._resolve_backend_id(args)
        api_key = self._resolve_api_key(args, identifier)
        if parse_backend_id(identifier) is BackendId.GEMINI and not api_key:
            self.print_or_log("A Gemini API key is required (--api-key or GOOGLE_API_KEY).", "error")
            return EXIT_FAILED

        report = asyncio.run(self._run(identifier, api_key, input_path, output_path))
        if report is None:
            return EXIT_FAILED
        return self._report(report, output_path)

    async def _run(
        self,
        identifier: str,
        api_key: Optional[str],
        input_path: Path,
        output_path: Path,
    ) -> Optional[RunReport]:
        backend = await create_backend(identifier, api_key=api_key, config_loader=self.config_loader)
        try:
            runner = BatchRunner(
                backend,
                retry_policy=RetryPolicy(self.config_manager.get_retry_settings()),
                progress_callback=self._on_progress,
            )
        except BackendUnavailableError as e:
            self.print_or_log(f"{e}: backend '{identifier}'", "error")
            self.print_or_log(remediation_for(identifier), "error")
            return None

        token = CancellationToken()
        _install_cancel_handlers(token)
        self.print_or_log(f"Running {input_path.name} through '{identifier}' -> {output_path}")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with input_path.open("rb") as prompt_stream:
                sink = output_path.open("wb")
                return await runner.run(prompt_stream, sink, cancel_token=token)
        finally:
            await backend.close()

    def _on_progress(self, current: int, total: int) -> None:
        self.print_or_log(f"Processing prompt {current}/{total}")

    def _report(self, report: RunReport, output_path: Path) -> int:
        summary = f"{report.written}/{report.total} records written to {output_path}"
        if report.state is RunState.COMPLETED:
            self.print_or_log(f"Batch completed: {summary}", "success")
            return EXIT_OK
        if report.state is RunState.CANCELLED:
            self.print_or_log(f"Batch cancelled: {summary}", "warning")
            return EXIT_CANCELLED
        self.print_or_log(f"Batch failed: {report.error}. {summary}", "error")
        return EXIT_FAILED


def main() -> None:
    RunBatchScript().execute()


if __name__ == "__main__":
    main()
