from typing import List, Optional, Tuple

from pushjob.core import config
from pushjob.core.models import PlanSummary, PublishPlan, RunContext, TriggerDecision
from pushjob.core.services.templates.core import resolve_tags
from pushjob.model import JobDefinition


def _format_cpu(cpu: float) -> str:
    return f"{cpu:g}"


def build_command(job: JobDefinition, image_refs: List[str]) -> List[str]:
    """
    argv для docker build с потолком ресурсов, метками и build-args.
    CPU ограничиваем через CFS-квоту: cpu=4 -> quota 400000 на период 100000.
    """
    build = job.build
    resources = job.resources

    cmd: List[str] = [
        config.DOCKER_BIN,
        "build",
        "--file",
        build.dockerfile_path,
        "--memory",
        f"{resources.memory}m",
        "--cpu-period",
        str(config.CPU_PERIOD_US),
        "--cpu-quota",
        str(int(round(resources.cpu * config.CPU_PERIOD_US))),
    ]
    for key, value in build.labels.items():
        cmd.extend(["--label", f"{key}={value}"])
    for key, value in build.args.items():
        cmd.extend(["--build-arg", f"{key}={value}"])
    for ref in image_refs:
        cmd.extend(["--tag", ref])
    cmd.append(build.context)
    return cmd


def build_plan(job: JobDefinition, context: RunContext) -> Tuple[PublishPlan, List[str], List[str]]:
    """
    Строим план сборки и публикации образа для одного запуска.

    Возвращает (PublishPlan, logs, warnings).
    """
    logs: List[str] = []
    warnings: List[str] = []

    logs.append(
        f"Строим план для job'а {job.name!r}: запуск #{context.execution_number}, "
        f"ветка {context.branch}"
    )

    tags, tag_logs, tag_warnings = resolve_tags(job.push.tags, context)
    logs.extend(tag_logs)
    warnings.extend(tag_warnings)

    repository = job.push.repository
    image_refs = [f"{repository}:{tag}" for tag in tags]

    push_commands = [[config.DOCKER_BIN, "push", ref] for ref in image_refs]

    plan = PublishPlan(
        repository=repository,
        tags=tags,
        image_refs=image_refs,
        build_command=build_command(job, image_refs),
        push_commands=push_commands,
        cpu=job.resources.cpu,
        memory_mb=job.resources.memory,
    )
    logs.append(
        f"План сформирован: сборка {job.build.dockerfile_path} "
        f"(cpu={_format_cpu(job.resources.cpu)}, memory={job.resources.memory}MB) "
        f"и {len(push_commands)} push'ей в {repository}."
    )

    return plan, logs, warnings


def summarize_plan(job: JobDefinition, decision: TriggerDecision, plan: Optional[PublishPlan] = None) -> PlanSummary:
    """
    Строит краткое резюме запуска для ответа CLI.
    """
    if not decision.fired or plan is None:
        description = f"Job {job.name!r} пропущен: изменённые пути не прошли фильтр."
        return PlanSummary(
            job_name=job.name,
            fired=False,
            tags_count=0,
            image_refs=[],
            description=description,
        )

    description = (
        f"Job {job.name!r}: образ собирается из {job.build.dockerfile_path} "
        f"и публикуется с тегами {', '.join(plan.tags)}."
    )
    return PlanSummary(
        job_name=job.name,
        fired=True,
        tags_count=len(plan.tags),
        image_refs=list(plan.image_refs),
        description=description,
    )
