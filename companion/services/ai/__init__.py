from companion.services.ai.llm_backends import LLMBackend, LLMResponse, OpenAIBackend, create_backend
from companion.services.ai.story_provider import StoryProvider

__all__ = ["LLMBackend", "LLMResponse", "OpenAIBackend", "StoryProvider", "create_backend"]
