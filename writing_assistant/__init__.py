"""
Writing Assistant - notes composer core.
"""

from writing_assistant.models import *
from writing_assistant.config import get_config, set_config, reset_config
from writing_assistant.llm_client import get_llm_client, reset_llm_client
from writing_assistant.composer import ComposerController
from writing_assistant.store import NoteStore

__version__ = "1.0.0"
__all__ = [
    "get_config",
    "set_config",
    "reset_config",
    "get_llm_client",
    "reset_llm_client",
    "ComposerController",
    "NoteStore",
]
