"""
nextup - task triage for development teams

Collects open tasks from issue trackers and planning documents, checks whether
the work already exists in the codebase, and ranks what to pick up next.
"""

from .__version__ import __version__, get_version_info

__all__ = ["__version__", "get_version_info"]
