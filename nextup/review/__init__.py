"""
Black-box review loop for change sets
"""

from .loop import ReviewCollaborator, ReviewLoop, ReviewOutcome, ReviewVerdict

__all__ = ["ReviewCollaborator", "ReviewLoop", "ReviewOutcome", "ReviewVerdict"]
