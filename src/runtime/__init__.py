"""Runtime engine exports."""

from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from .prompts import PromptSpeaker

__all__ = ["PromptSpeaker", "RuntimeBootstrap", "RuntimeEngine", "RuntimeHooks"]
