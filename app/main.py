"""Main module entrypoint for local runtime execution.

This module validates startup configuration, initializes the runtime once and
launches either the FastAPI service or a one-shot order submission.
"""

import argparse
import json
from pathlib import Path

import uvicorn
from loguru import logger

from app.bootstrap import (
    bootstrap_create_application,
    bootstrap_create_client,
    bootstrap_create_poll_loop,
    bootstrap_initialize_runtime,
)
from app.config import BridgeSettings, config_load_settings
from app.domain import ContractSubmittedEvent, domain_build_job_spec
from app.jobs import JobSubmissionError


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when a submitted order fails.
    """

    argument_parser = argparse.ArgumentParser(description="Lilypad Bacalhau bridge runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "submit"),
        help="Runtime command: `api` starts the server with background polling, "
        "`submit` submits one order and polls until its job finishes",
        type=str,
    )
    argument_parser.add_argument(
        "--order-id",
        dest="order_id",
        type=str,
        help="Contract order identifier for `submit`",
    )
    argument_parser.add_argument(
        "--spec-file",
        dest="spec_file",
        type=Path,
        help="JSON job spec file for `submit` with `docker_image` and optional "
        "`entrypoint`, `environment`, `concurrency`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    bootstrap_initialize_runtime(settings)

    if parsed_arguments.command == "submit":
        if not parsed_arguments.order_id or parsed_arguments.spec_file is None:
            argument_parser.error("`submit` requires --order-id and --spec-file")
        main_submit_order(
            settings=settings,
            order_id=parsed_arguments.order_id,
            spec_file=parsed_arguments.spec_file,
        )
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_submit_order(settings: BridgeSettings, order_id: str, spec_file: Path) -> None:
    """Submit one order and poll until its job is retired.

    Args:
        settings: Validated runtime settings.
        order_id: Contract order identifier.
        spec_file: Path to a JSON job spec document.

    Returns:
        None: Returns when the job completed.

    Raises:
        SystemExit: Raised with status 1 when submission or the job failed.
    """

    job_spec = domain_build_job_spec(json.loads(spec_file.read_text(encoding="utf-8")))
    client = bootstrap_create_client(settings)
    poll_loop = bootstrap_create_poll_loop(settings, client)
    try:
        try:
            poll_loop.loop_submit(ContractSubmittedEvent(order_id=order_id, job_spec=job_spec))
        except JobSubmissionError as error:
            logger.error("Order submission failed: {}", error)
            raise SystemExit(1) from error

        poll_loop.loop_run_until_idle()
    finally:
        client.adapter_close()

    failed_events = poll_loop.tracker.tracker_failed()
    for failed_event in failed_events:
        print("FAILED:", failed_event.order_id, failed_event.job_id)
    for completed_event in poll_loop.tracker.tracker_completed():
        print("COMPLETED:", completed_event.order_id, completed_event.job_id)
    if failed_events:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
