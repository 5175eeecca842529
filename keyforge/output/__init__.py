"""
KeyForge Output Module
=======================

Console display and JSON / CSV reports for KeyForge results.
"""

from keyforge.output.console import ForgeConsoleOutput
from keyforge.output.report import ForgeReportGenerator

__all__ = [
    "ForgeConsoleOutput",
    "ForgeReportGenerator",
]
