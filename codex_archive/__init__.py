"""
codex-archive - grouping engine for a personal journalism archive
"""

__version__ = "0.3.0"
