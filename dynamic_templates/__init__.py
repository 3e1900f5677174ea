"""
Dynamic Templates - regenerate script-driven sections of Obsidian notes
"""

__version__ = "0.1.0"
