"""
KeyForge Shared Module
======================

Configuration, logging, console, networking and statistics utilities
shared across the KeyForge toolkit.
"""

from shared.config import ForgeConfig

__all__ = ["ForgeConfig"]
