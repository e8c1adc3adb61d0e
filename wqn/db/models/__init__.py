# SQLAlchemy models
from .base import Base
from .content import Problem, ProblemTag, Subject, Tag
from .problem_sets import ProblemSet, ProblemSetProblem, ProblemSetShare
from .review import ReviewSessionResult, ReviewSessionState

__all__ = [
    # Base
    "Base",
    # Content
    "Subject",
    "Tag",
    "Problem",
    "ProblemTag",
    # Problem sets
    "ProblemSet",
    "ProblemSetProblem",
    "ProblemSetShare",
    # Review sessions
    "ReviewSessionState",
    "ReviewSessionResult",
]
