from .core import GitPushReader
from .models import ChangeSet

from .exceptions import (
    GitExceptions,
    GitRepositoryError,
    GitRevisionError,
)

__all__ = [
    "GitPushReader",
    "ChangeSet",
    "GitExceptions",
    "GitRepositoryError",
    "GitRevisionError",
]
