# Self-Improving Coding Agent
# Copyright (c) 2025 Maxime Robeyns
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.
from enum import Enum
from datetime import datetime
from dataclasses import field, dataclass


class EventType(Enum):
    NETWORK_START = "network_start"
    AGENT_SELECTED = "agent_selected"
    SYSTEM_PROMPT_UPDATE = "system_prompt_update"
    ASSISTANT_MESSAGE = "assistant_message"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    STATE_UPDATE = "state_update"
    ROUND_COMPLETE = "round_complete"
    APPLICATION_ERROR = "application_error"
    APPLICATION_WARNING = "application_warning"
    NETWORK_COMPLETE = "network_complete"


@dataclass
class Event:
    """Base class for all events in the stream"""

    type: EventType
    content: str
    metadata: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
