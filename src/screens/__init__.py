"""
Modal screens for the assistant session.
"""
from .option_picker_screen import OptionPickerScreen

__all__ = ["OptionPickerScreen"]
