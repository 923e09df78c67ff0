"""
Custom UI widgets for the assistant session.
"""
from .input_area import InputArea
from .chat_log import ChatLog
from .suggestion_list import SuggestionList
from .status_bar import ClockWidget, StatusBar

__all__ = ["InputArea", "ChatLog", "SuggestionList", "ClockWidget", "StatusBar"]
