"""Built-in provider dialects"""

from .openai_chat import OpenAIChatDialect

__all__ = ["OpenAIChatDialect"]
