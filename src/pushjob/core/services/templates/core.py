import re
from string import Template
from typing import Dict, List, Tuple

from pushjob.core import config
from pushjob.core.exceptions import TemplateError
from pushjob.core.models import RunContext


# https://docs.docker.com/reference/cli/docker/image/tag/
DOCKER_TAG_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")
_TAG_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_.-]")
_BRANCH_PREFIX = "refs/heads/"


class TagTemplate(Template):
    # $JB_SPACE_EXECUTION_NUMBER, ${BRANCH}; $$ — литерал "$"
    idpattern = r"(?a:[_a-zA-Z][_a-zA-Z0-9]*)"
    flags = 0


def short_branch(branch: str) -> str:
    branch = branch.strip()
    if branch.startswith(_BRANCH_PREFIX):
        return branch[len(_BRANCH_PREFIX):]
    return branch


def full_branch(branch: str) -> str:
    branch = branch.strip()
    if branch.startswith("refs/"):
        return branch
    return _BRANCH_PREFIX + branch


def build_variables(context: RunContext) -> Dict[str, str]:
    """
    Собирает словарь переменных запуска.
    Пользовательские extra-переменные перекрывают встроенные.
    """
    variables: Dict[str, str] = {}
    for name in config.EXECUTION_NUMBER_ALIASES:
        variables[name] = str(context.execution_number)
    for name in config.BRANCH_ALIASES:
        variables[name] = short_branch(context.branch)
    for name in config.FULL_BRANCH_ALIASES:
        variables[name] = full_branch(context.branch)
    variables.update(context.extra)
    return variables


def resolve_template(template: str, variables: Dict[str, str]) -> str:
    try:
        return TagTemplate(template).substitute(variables)
    except KeyError as e:
        raise TemplateError(template, f"unknown variable {e.args[0]!r}")
    except ValueError as e:
        raise TemplateError(template, str(e))


def sanitize_tag(tag: str) -> str:
    tag = _TAG_INVALID_CHARS.sub("-", tag)
    if tag[:1] in (".", "-"):
        tag = "_" + tag[1:]
    return tag[:128]


def resolve_tags(templates: List[str], context: RunContext) -> Tuple[List[str], List[str], List[str]]:
    """
    Разрешает все шаблоны тегов для одного запуска.

    Возвращает (tags, logs, warnings). Порядок тегов сохраняется,
    повторы выкидываются.
    """
    logs: List[str] = []
    warnings: List[str] = []
    variables = build_variables(context)

    tags: List[str] = []
    for template in templates:
        tag = resolve_template(template, variables)
        if not tag:
            raise TemplateError(template, "resolves to an empty tag")
        if not DOCKER_TAG_RE.match(tag):
            fixed = sanitize_tag(tag)
            warnings.append(
                f"Тег {tag!r} (шаблон {template!r}) недопустим для docker — "
                f"заменён на {fixed!r}."
            )
            tag = fixed
        if tag in tags:
            warnings.append(f"Тег {tag!r} повторяется — пушим его один раз.")
            continue
        logs.append(f"Шаблон {template!r} -> {tag!r}")
        tags.append(tag)

    return tags, logs, warnings
