"""Error handling for backoffcase.

- BackoffError/Permanent/Transient: classification of operation failures
- classify: default conversion (unclassified errors are Transient)
- Result/Ok/Err: fallible items for backed-off streams
"""

from .errors import BackoffError, Permanent, Transient, classify
from .result import Err, Ok, Result

__all__ = [
    # Classification
    "BackoffError", "Permanent", "Transient", "classify",
    # Result
    "Result", "Ok", "Err",
]
