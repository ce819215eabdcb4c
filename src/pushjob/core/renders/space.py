from typing import List

from pushjob.model import JobDefinition


INDENT = "    "


def kotlin_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def format_cpu(cpu: float) -> str:
    if float(cpu).is_integer():
        return f"{int(cpu)}.cpu"
    return f"{int(round(cpu * 1000))}.mcpu"


def _block(lines: List[str], level: int, header: str, body: List[str]) -> None:
    lines.append(f"{INDENT * level}{header} {{")
    lines.extend(body)
    lines.append(f"{INDENT * level}}}")


def render(job: JobDefinition) -> str:
    """
    Рендерит JobDefinition в .space.kts (Kotlin DSL JetBrains Space Automation).
    """
    lines: List[str] = []
    trigger = job.trigger

    filters: List[str] = []
    if not trigger.case_sensitive:
        # сам Space этот флаг не знает, его читает только pushjob
        filters.append(f"{INDENT * 4}caseSensitive = false")
    filters += [f"{INDENT * 4}-{kotlin_string(p)}" for p in trigger.exclude_patterns]
    filters += [f"{INDENT * 4}+{kotlin_string(p)}" for p in trigger.include_patterns]

    job_body: List[str] = []
    start_on: List[str] = []
    git_push: List[str] = []
    _block(git_push, 3, "pathFilter", filters)
    _block(start_on, 2, "gitPush", git_push)
    _block(job_body, 1, "startOn", start_on)
    job_body.append("")

    docker: List[str] = []
    _block(
        docker,
        2,
        "resources",
        [
            f"{INDENT * 3}cpu = {format_cpu(job.resources.cpu)}",
            f"{INDENT * 3}memory = {job.resources.memory}.mb",
        ],
    )

    build = [
        f"{INDENT * 3}context = {kotlin_string(job.build.context)}",
        f"{INDENT * 3}file = {kotlin_string(job.build.dockerfile_path)}",
    ]
    for key, value in job.build.labels.items():
        build.append(f"{INDENT * 3}labels[{kotlin_string(key)}] = {kotlin_string(value)}")
    for key, value in job.build.args.items():
        build.append(f"{INDENT * 3}args[{kotlin_string(key)}] = {kotlin_string(value)}")
    _block(docker, 2, "build", build)
    docker.append("")

    tags = ", ".join(kotlin_string(tag) for tag in job.push.tags)
    _block(
        docker,
        2,
        f"push({kotlin_string(job.push.repository)})",
        [f"{INDENT * 3}tags({tags})"],
    )
    _block(job_body, 1, "docker", docker)

    _block(lines, 0, f"job({kotlin_string(job.name)})", job_body)
    return "\n".join(lines) + "\n"
