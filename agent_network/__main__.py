# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""
Main entrypoint when running the network with `python -m agent_network`.
"""

import sys
import json
import signal
import asyncio
import logging
import argparse

from pathlib import Path

from .config import get_settings
from .events import log_to_stdout
from .llm import get_provider
from .network import Network, create_code_writing_network
from .types.event_types import EventType
from .types.llm_types import Model
from .types.network_types import NetworkOutcome

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agent_network")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Plan and apply a fix for an issue in a repository")
    run_parser.add_argument(
        "--repo",
        type=str,
        required=True,
        help="Name of the repository the issue is about",
    )
    issue_group = run_parser.add_mutually_exclusive_group(required=True)
    issue_group.add_argument(
        "--issue",
        type=str,
        help="The issue text",
    )
    issue_group.add_argument(
        "--issue-file",
        type=str,
        help="A file containing the issue text; useful for longer issues",
    )
    run_parser.add_argument(
        "--workdir",
        type=str,
        default=".",
        help="The checkout of the repository the agents may read and edit",
    )
    run_parser.add_argument(
        "--logdir",
        type=str,
        default=None,
        help="Where to save the event trace of the run",
    )
    run_parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model id to use; defaults to the MODEL setting",
    )
    run_parser.add_argument(
        "--max-rounds",
        type=int,
        default=None,
        help="Fail the run after this many rounds without completing",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed for each inference call",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def print_summary(outcome: NetworkOutcome) -> None:
    print(f"\n{outcome}")
    for result in outcome.results:
        calls = ", ".join(
            f"{r.tool_name}({'ok' if r.succeeded else r.error_type or 'failed'})"
            for r in result.tool_calls
        )
        print(f"  [{result.round_index}] {result.agent_name}: {calls or 'no tool calls'}")

    plan = outcome.state.get("plan")
    if plan is not None:
        print("\nPlan:")
        print(json.dumps(plan, indent=2))
    if outcome.state.get("summary"):
        print(f"\nSummary: {outcome.state['summary']}")


async def run_network(args: argparse.Namespace) -> NetworkOutcome:
    settings = get_settings()

    issue = args.issue if args.issue is not None else Path(args.issue_file).read_text()
    model = settings.model
    if args.model:
        model = Model.from_id(args.model, settings.PROVIDER)
        model.max_output_tokens = settings.MAX_TOKENS

    network: Network = create_code_writing_network(
        repo=args.repo,
        issue=issue,
        workdir=args.workdir,
        provider=get_provider(model, settings),
        model=model,
        temperature=settings.TEMPERATURE,
        max_rounds=args.max_rounds if args.max_rounds is not None else settings.MAX_ROUNDS,
        round_timeout=args.timeout if args.timeout is not None else settings.ROUND_TIMEOUT,
        tool_timeout=settings.TOOL_TIMEOUT,
    )
    network.event_bus.subscribe(list(EventType), log_to_stdout)

    # Cancel the run on SIGINT/SIGTERM; the network finishes any round that is
    # applying tool calls before the cancellation lands
    task = asyncio.ensure_future(network.run())
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
        except NotImplementedError:
            logger.debug(f"Cannot register a handler for {sig.name} on this platform")

    try:
        outcome = await task
    except asyncio.CancelledError:
        logger.warning("Run cancelled")
        outcome = network.outcome()
    finally:
        if args.logdir:
            network.event_bus.save_state(Path(args.logdir))
            logger.info(f"Saved event trace to {args.logdir}")

    return outcome


def main(argv: list[str] | None = None) -> int:
    parser = setup_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.captureWarnings(True)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler()],
    )

    if args.command == "run":
        outcome = asyncio.run(run_network(args))
        print_summary(outcome)
        return 0 if outcome.succeeded else 1
    return 1


if __name__ == "__main__":
    sys.exit(main())
