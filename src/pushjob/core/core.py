from typing import Dict, Optional

from pushjob.model import JobDefinition

from .exceptions import TemplateError
from .models import PlanResponse, PushEvent, RunContext
from .services.builders import plan as builder
from .services.git_module import GitPushReader
from .services.trigger import core as trigger


class PushJobCore:
    """
    Связка "push-событие -> решение триггера -> план сборки/публикации".

    Ничего не запускает: только решает, должен ли job сработать,
    и описывает команды docker build/push для внешнего CI-движка.
    """

    def __init__(self, job: JobDefinition, default_branch: Optional[str] = None):
        self.job = job
        self.git = GitPushReader(default_branch) if default_branch else GitPushReader()
        self.logs: list[str] = []
        self.warnings: list[str] = []
        # логи чтения push'а из git, попадут в ответ следующего evaluate
        self._event_logs: list[str] = []

    def read_event(
        self,
        repo_path: str,
        before: Optional[str] = None,
        after: str = "HEAD",
        branch: Optional[str] = None,
    ) -> PushEvent:
        changes = self.git.read_push(repo_path, before=before, after=after, branch=branch)
        self._event_logs = list(changes.logs)
        return changes.to_event()

    def evaluate(
        self,
        event: PushEvent,
        execution_number: int,
        extra: Optional[Dict[str, str]] = None,
    ) -> PlanResponse:
        # один вызов = одно событие: логи прошлых запусков не тянем
        self.logs = self._event_logs
        self.warnings = []
        self._event_logs = []

        self.logs.append(
            f"Push в ветку {event.branch} ({event.source}): "
            f"{len(event.changed_paths)} изменённых путей"
        )

        # 1) Фильтр путей
        decision, trigger_logs = trigger.should_fire(self.job.trigger, event.changed_paths)
        self.logs.extend(trigger_logs)

        if not decision.fired:
            return PlanResponse(
                status="skipped",
                decision=decision,
                plan=None,
                warnings=self.warnings,
                logs=self.logs,
                summary=builder.summarize_plan(self.job, decision),
            )

        # 2) План сборки и публикации
        context = RunContext(
            execution_number=execution_number,
            branch=event.branch,
            extra=extra or {},
        )
        try:
            plan, plan_logs, plan_warnings = builder.build_plan(self.job, context)
        except TemplateError as e:
            self.logs.extend(e.logs)
            self.logs.append(e.description)
            self.warnings.append(
                "Не удалось разрешить шаблоны тегов. Проверьте push.tags и переменные запуска."
            )
            return PlanResponse(
                status="error",
                decision=decision,
                plan=None,
                warnings=self.warnings,
                logs=self.logs,
                summary=None,
            )

        self.logs.extend(plan_logs)
        self.warnings.extend(plan_warnings)

        return PlanResponse(
            status="ok",
            decision=decision,
            plan=plan,
            warnings=self.warnings,
            logs=self.logs,
            summary=builder.summarize_plan(self.job, decision, plan),
        )
