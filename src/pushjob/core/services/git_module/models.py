from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from pushjob.core.models import PushEvent


@dataclass
class ChangeSet:
    """
    Результат чтения push'а из локального репозитория.

    repo_path     — корень репозитория.
    branch        — активная ветка (или ветка по умолчанию при detached HEAD).
    before, after — полные sha коммитов; before = None для корневого коммита.
    changed_paths — изменённые пути (при переименовании — оба пути).
    logs          — текстовые логи шагов.
    """

    repo_path: Path
    branch: str
    after: str
    before: Optional[str] = None
    changed_paths: List[str] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)

    def to_event(self) -> PushEvent:
        return PushEvent(
            branch=self.branch,
            changed_paths=list(self.changed_paths),
            source="git",
        )
