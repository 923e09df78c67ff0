"""
Session core: request multiplexing, streaming, suggestions, scrolling and clock.
"""
