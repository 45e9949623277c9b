# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for the command line entrypoint."""
import pytest

from unittest.mock import patch

from agent_network.__main__ import main, setup_parser
from agent_network.network import NetworkState
from agent_network.types.network_types import NetworkStatus, NetworkOutcome


class TestParser:

    def test_run_arguments(self):
        args = setup_parser().parse_args([
            "run", "--repo", "calc", "--issue", "add is broken",
            "--workdir", "/tmp/calc", "--max-rounds", "10", "--timeout", "30", "--debug",
        ])
        assert args.command == "run"
        assert args.repo == "calc"
        assert args.issue == "add is broken"
        assert args.issue_file is None
        assert args.max_rounds == 10
        assert args.timeout == 30.0
        assert args.debug

    def test_issue_sources_are_exclusive(self):
        with pytest.raises(SystemExit):
            setup_parser().parse_args(["run", "--repo", "calc", "--issue", "x", "--issue-file", "y"])

    def test_issue_required(self):
        with pytest.raises(SystemExit):
            setup_parser().parse_args(["run", "--repo", "calc"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            setup_parser().parse_args([])


class TestExitCode:

    @pytest.mark.parametrize("status,code", [
        (NetworkStatus.TERMINATED, 0),
        (NetworkStatus.FAILED, 1),
        (NetworkStatus.STALLED, 1),
    ])
    def test_exit_code_follows_status(self, status, code, capsys):
        outcome = NetworkOutcome(status=status, state=NetworkState({"plan": {"steps": ["s"]}}).get())

        async def fake_run(args):
            return outcome

        with patch("agent_network.__main__.run_network", fake_run):
            assert main(["run", "--repo", "calc", "--issue", "x"]) == code

        out = capsys.readouterr().out
        assert status.value in out
        assert '"steps"' in out
