import shlex

from pydantic import BaseModel, Field
from typing import List, Literal, Dict, Optional


class PushEvent(BaseModel):
    """
    Push-уведомление от системы контроля версий.
    branch        — имя ветки (можно полным ref'ом: refs/heads/main)
    changed_paths — изменённые пути относительно корня репозитория
    """
    branch: str
    changed_paths: List[str] = Field(default_factory=list)
    # Откуда взяли событие: "cli", "git" и т.п. — только для логов
    source: str = "cli"


class RunContext(BaseModel):
    """
    Переменные конкретного запуска, которые подставляются в шаблоны тегов.
    """
    execution_number: int = Field(ge=0)
    branch: str
    extra: Dict[str, str] = Field(default_factory=dict)


class TriggerDecision(BaseModel):
    fired: bool
    matched_paths: List[str] = Field(default_factory=list)
    excluded_paths: List[str] = Field(default_factory=list)
    ignored_paths: List[str] = Field(default_factory=list)


class PublishPlan(BaseModel):
    """
    Разрешённый план сборки и публикации образа.
    build_command — argv для docker build
    push_commands — по одному argv на каждый тег
    """
    repository: str
    tags: List[str]
    image_refs: List[str]
    build_command: List[str]
    push_commands: List[List[str]]
    cpu: float
    memory_mb: int

    def script(self) -> List[str]:
        """
        Тот же план, но в виде shell-строк (для CI-скриптов и вывода в консоль).
        """
        return [shlex.join(self.build_command)] + [
            shlex.join(cmd) for cmd in self.push_commands
        ]


class PlanSummary(BaseModel):
    job_name: str
    fired: bool
    tags_count: int
    image_refs: List[str]
    # Короткое текстовое описание для CLI
    description: str


class PlanResponse(BaseModel):
    status: Literal["ok", "skipped", "error"]
    decision: Optional[TriggerDecision] = None
    plan: Optional[PublishPlan] = None
    warnings: List[str] = []
    logs: List[str] = []
    summary: Optional[PlanSummary] = None
