"""
Version information for nextup
"""

__version__ = "0.4.0"
__title__ = "nextup"
__description__ = "Task triage: find, validate, and rank the next task worth picking up"


def get_version_info() -> str:
    """Return a human-readable version string"""
    return f"{__title__} {__version__} - {__description__}"
