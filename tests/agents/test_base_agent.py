# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
"""Tests for the BaseAgent contract: tools, history projection, instructions
and the two halves of a round."""
import pytest

from agent_network.agents.base_agent import BaseAgent, CONTINUE_PROMPT, NO_VALUE
from agent_network.errors import RoundError
from agent_network.network import Network
from agent_network.tools.base_tool import create_tool
from agent_network.tools.network_tools import Done, SubmitPlan
from agent_network.types.agent_types import AgentResult
from agent_network.types.event_types import EventType
from agent_network.types.llm_types import Model, TextContent, ToolCallContent, ToolResultContent
from agent_network.types.tool_types import ToolCallRecord, ToolResult


class AlphaAgent(BaseAgent):
    AGENT_NAME = "alpha"
    AGENT_DESCRIPTION = "Test agent"
    SYSTEM_PROMPT = "Repo: {repo}. Plan: {plan}."
    AVAILABLE_TOOLS = [SubmitPlan, Done]


def _result(agent_name: str, *texts: str, calls: list[ToolCallRecord] | None = None) -> AgentResult:
    return AgentResult(agent_name=agent_name, output=list(texts), tool_calls=calls or [])


def _record(call_id: str, name: str = "done", result: ToolResult | None = None) -> ToolCallRecord:
    return ToolCallRecord(call_id=call_id, tool_name=name, tool_args={}, result=result)


class TestToolTable:

    def test_tools_keyed_by_name_in_order(self):
        agent = AlphaAgent()
        assert list(agent.tools) == ["submit_plan", "done"]
        assert agent.tools["done"] is Done

    def test_duplicate_tool_names_rejected(self):
        Other = create_tool("done", "Another done", lambda args, ctx: None)

        class Clashing(AlphaAgent):
            AGENT_NAME = "clashing"
            AVAILABLE_TOOLS = [Done, Other]

        with pytest.raises(ValueError, match="done"):
            Clashing()

    def test_same_tool_name_in_different_agents(self):
        """Tool names only need to be unique within one agent."""
        Other = create_tool("done", "Another done", lambda args, ctx: None)

        class Beta(AlphaAgent):
            AGENT_NAME = "beta"
            AVAILABLE_TOOLS = [Other]

        assert AlphaAgent().tools["done"] is Done
        assert Beta().tools["done"] is Other

    def test_model_resolution(self):
        network = Network([], model=Model(id="network-model"))
        assert AlphaAgent().resolve_model(network).id == "network-model"
        assert AlphaAgent(model=Model(id="own-model")).resolve_model(network).id == "own-model"
        with pytest.raises(ValueError):
            AlphaAgent().resolve_model(Network([]))


class TestProjectHistory:

    def test_only_own_entries_in_log_order(self):
        log = [
            _result("alpha", "a1"),
            _result("beta", "b1"),
            _result("alpha", "a2"),
            _result("beta", "b2"),
            _result("alpha", "a3"),
        ]
        messages = AlphaAgent().project_history(log)

        texts = [block.text for m in messages for block in m.content]
        assert texts == ["a1", "a2", "a3"]
        assert all(m.role == "assistant" for m in messages)

    def test_no_own_entries_gives_empty_history(self):
        log = [_result("beta", "b1"), _result("gamma", "g1")]
        assert AlphaAgent().project_history(log) == []

    def test_outputs_then_calls_then_results(self):
        ok = ToolResult(tool_name="submit_plan", success=True, output="Plan saved")
        log = [
            _result("alpha", "thinking", calls=[_record("c1", "submit_plan", ok), _record("c2")]),
        ]
        assistant, user = AlphaAgent().project_history(log)

        assert assistant.role == "assistant"
        assert isinstance(assistant.content[0], TextContent)
        assert [type(b) for b in assistant.content[1:]] == [ToolCallContent, ToolCallContent]
        assert [b.call_id for b in assistant.content[1:]] == ["c1", "c2"]

        assert user.role == "user"
        assert all(isinstance(b, ToolResultContent) for b in user.content)
        assert [b.call_id for b in user.content] == ["c1", "c2"]
        assert "Plan saved" in user.content[0].content
        # A handler that returned nothing still answers its call
        assert user.content[1].content == NO_VALUE

    def test_empty_round_is_skipped(self):
        log = [_result("alpha"), _result("alpha", "second")]
        messages = AlphaAgent().project_history(log)
        assert len(messages) == 1
        assert messages[0].content[0].text == "second"


class TestRenderInstructions:

    def test_interpolates_state(self):
        text = AlphaAgent().render_instructions({"repo": "calc", "plan": "p"})
        assert text == "Repo: calc. Plan: p."

    def test_missing_fields_render_as_none(self):
        assert AlphaAgent().render_instructions({}) == "Repo: None. Plan: None."

    def test_deterministic(self):
        state = {"repo": "calc", "plan": {"steps": ["a"]}}
        agent = AlphaAgent()
        assert agent.render_instructions(state) == agent.render_instructions(dict(state))

    def test_default_gate_is_open(self):
        assert AlphaAgent().is_eligible({})


class TestRound:

    @pytest.mark.asyncio
    async def test_infer_sends_instructions_input_and_history(self, scripted_provider, completion, test_model):
        provider = scripted_provider(completion(text="ok"))
        network = Network(
            [AlphaAgent()],
            state={"repo": "calc"},
            provider=provider,
            input="Fix the bug",
            model=test_model,
        )
        network.state.append_result(_result("alpha", "earlier"))
        network.state.append_result(_result("other", "not mine"))

        await AlphaAgent().infer(network)

        request = provider.requests[0]
        messages = request["messages"]
        assert messages[0].role == "system"
        assert messages[0].content[0].text == "Repo: calc. Plan: None."
        assert messages[1].content[0].text == "Fix the bug"
        assert [m.content[0].text for m in messages[2:]] == ["earlier", CONTINUE_PROMPT]
        assert messages[-1].role == "user"
        assert request["model"] is test_model
        assert request["temperature"] == AlphaAgent.TEMPERATURE
        assert [t.TOOL_NAME for t in request["available_tools"]] == ["submit_plan", "done"]

        prompts = network.event_bus.get_events_by_type(EventType.SYSTEM_PROMPT_UPDATE)
        assert prompts[0].content == "Repo: calc. Plan: None."

    @pytest.mark.asyncio
    async def test_continuation_only_after_text_only_round(self, scripted_provider, completion, test_model):
        provider = scripted_provider(completion(text="ok"), completion(text="ok"))
        network = Network([AlphaAgent()], provider=provider, model=test_model)

        network.state.append_result(_result("alpha", "thinking"))
        await AlphaAgent().infer(network)
        network.state.append_result(_result("alpha", calls=[_record("c1")]))
        await AlphaAgent().infer(network)

        after_text = provider.requests[0]["messages"]
        assert [m.role for m in after_text] == ["system", "user", "assistant", "user"]
        assert after_text[-1].content[0].text == CONTINUE_PROMPT

        # Tool results already close the replay with a user message
        after_calls = provider.requests[1]["messages"]
        assert after_calls[-1].role == "user"
        assert isinstance(after_calls[-1].content[0], ToolResultContent)
        assert all(
            not (isinstance(block, TextContent) and block.text == CONTINUE_PROMPT)
            for m in after_calls for block in m.content
        )

    @pytest.mark.asyncio
    async def test_infer_without_provider_is_a_round_error(self, test_model):
        network = Network([AlphaAgent()], model=test_model)
        with pytest.raises(RoundError):
            await AlphaAgent().infer(network)

    @pytest.mark.asyncio
    async def test_instance_temperature_overrides_class(self, scripted_provider, completion, test_model):
        provider = scripted_provider(completion(text="ok"))
        network = Network([], provider=provider, model=test_model)
        await AlphaAgent(temperature=0.1).infer(network)
        assert provider.requests[0]["temperature"] == 0.1

    @pytest.mark.asyncio
    async def test_dispatch_does_not_touch_the_log(self, completion):
        network = Network([AlphaAgent()])
        result = await AlphaAgent().dispatch(
            completion(("submit_plan", {"thoughts": "t", "steps": ["one"]}), text="  planning  "),
            network,
        )

        assert result.agent_name == "alpha"
        assert result.output == ["  planning"]
        assert result.tool_calls[0].succeeded
        assert result.metrics.tool_calls == 1
        assert result.metrics.end_time is not None
        assert network.state.read("plan") == {"thoughts": "t", "steps": ["one"], "files": []}
        # Appending is the network's job
        assert network.state.results == ()

    @pytest.mark.asyncio
    async def test_dispatch_skips_blank_text(self, completion):
        network = Network([AlphaAgent()])
        result = await AlphaAgent().dispatch(completion(text="   \n"), network)
        assert result.output == []
        assert network.event_bus.get_events_by_type(EventType.ASSISTANT_MESSAGE) == []

    @pytest.mark.asyncio
    async def test_round_is_infer_then_dispatch(self, scripted_provider, completion, test_model):
        provider = scripted_provider(completion(("done", {"summary": "s"})))
        network = Network([AlphaAgent()], provider=provider, model=test_model)

        result = await AlphaAgent().round(network)

        assert [r.tool_name for r in result.tool_calls] == ["done"]
        assert network.state.done
