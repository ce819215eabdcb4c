import re
import shlex
from typing import Any, Dict, List

import yaml

from pushjob.core import config
from pushjob.core.services.builders.plan import build_command
from pushjob.model import JobDefinition


DOCKER_IMAGE = "docker:24"
DOCKER_SERVICE = "docker:24-dind"
STAGE = "docker"

_SAFE_ARG = re.compile(r"^[\w@%+=:,./-]+$")


def _shell_arg(arg: str) -> str:
    """
    Аргумент для shell-скрипта GitLab. Аргументы с $VAR оставляем в двойных
    кавычках, чтобы shell подставил переменные; $$ из шаблона — литерал "$".
    """
    if _SAFE_ARG.match(arg):
        return arg
    if "$" in arg:
        escaped = arg.replace("\\", "\\\\").replace('"', '\\"').replace("`", "\\`")
        escaped = escaped.replace("$$", "\\$")
        return f'"{escaped}"'
    return shlex.quote(arg)


def _shell_line(argv: List[str]) -> str:
    return " ".join(_shell_arg(arg) for arg in argv)


def job_key(job: JobDefinition) -> str:
    key = re.sub(r"[^a-z0-9_-]+", "_", job.name.lower()).strip("_")
    return key or "docker_publish"


def limitations(job: JobDefinition) -> List[str]:
    """
    Что из описания job'а GitLab CI выразить не может.
    """
    warnings: List[str] = []
    if job.trigger.exclude_patterns:
        warnings.append(
            "GitLab rules:changes не поддерживает исключения — excludePatterns "
            f"({', '.join(job.trigger.exclude_patterns)}) не перенесены."
        )
    if not job.trigger.case_sensitive:
        warnings.append("GitLab rules:changes всегда регистрозависим — caseSensitive проигнорирован.")
    warnings.append(
        "Невалидные для docker символы в именах веток GitLab не заменяет — "
        "проверьте шаблоны тегов с $BRANCH."
    )
    return warnings


def build_job(job: JobDefinition) -> Dict[str, Any]:
    refs = [f"{job.push.repository}:{tag}" for tag in job.push.tags]

    variables: Dict[str, str] = {}
    for name in config.EXECUTION_NUMBER_ALIASES:
        variables[name] = "$CI_PIPELINE_IID"
    for name in config.BRANCH_ALIASES:
        variables[name] = "$CI_COMMIT_REF_NAME"
    for name in config.FULL_BRANCH_ALIASES:
        variables[name] = "refs/heads/$CI_COMMIT_REF_NAME"
    # Лимиты для Kubernetes executor'а
    variables["KUBERNETES_CPU_LIMIT"] = f"{job.resources.cpu:g}"
    variables["KUBERNETES_MEMORY_LIMIT"] = f"{job.resources.memory}Mi"

    rule: Dict[str, Any] = {"if": '$CI_PIPELINE_SOURCE == "push"'}
    if job.trigger.include_patterns:
        rule["changes"] = list(job.trigger.include_patterns)

    script = [_shell_line(build_command(job, refs))]
    script += [_shell_line([config.DOCKER_BIN, "push", ref]) for ref in refs]

    return {
        "stage": STAGE,
        "image": DOCKER_IMAGE,
        "services": [DOCKER_SERVICE],
        "variables": variables,
        "rules": [rule],
        "script": script,
    }


def render(job: JobDefinition) -> str:
    """
    Рендерит JobDefinition в .gitlab-ci.yml (один stage, один job).
    Ограничения переноса пишем комментариями в начало файла.
    """
    header = [f"# {job.name}"] + [f"# WARNING: {w}" for w in limitations(job)]
    document = {"stages": [STAGE], job_key(job): build_job(job)}
    body = yaml.safe_dump(document, sort_keys=False, allow_unicode=True, width=1000)
    return "\n".join(header) + "\n" + body
