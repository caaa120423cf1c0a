"""Chat turn orchestration."""

from queryiq.chat.orchestrator import (
    ChatOrchestrator,
    ChatTurnResult,
    TurnStatus,
    tool_result_message,
)

__all__ = ["ChatOrchestrator", "ChatTurnResult", "TurnStatus", "tool_result_message"]
