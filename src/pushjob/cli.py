import click

from pushjob import settings
from pushjob.core import config
from pushjob.core.core import PushJobCore
from pushjob.core.exceptions import JobExceptions
from pushjob.core.loader import load_job_definition
from pushjob.core.models import PushEvent
from pushjob.core.renders import gitlab as gitlab_render
from pushjob.core.renders import job_yaml as yaml_render
from pushjob.core.renders import space as space_render
from pushjob.core.services.git_module.exceptions import GitExceptions
from pushjob.core.services.trigger import core as trigger
from pushjob.utils import output_path, parse_vars, read_lines


RENDERS = {
    "space": space_render.render,
    "gitlab": gitlab_render.render,
    "yaml": yaml_render.render,
}


def _fail(logs) -> None:
    # описание ошибки CLIException уже напечатал сам — добавляем только шаги
    for line in logs:
        click.echo(f"  {line}", err=True)
    raise click.exceptions.Exit(1)


def _load(job_file: str):
    try:
        job, warnings = load_job_definition(job_file)
    except JobExceptions as e:
        _fail(e.logs)
    for warning in warnings:
        click.echo(f"WARNING: {warning}", err=True)
    return job


@click.group()
@click.version_option(package_name="pushjob")
def main():
    """Path-filtered docker build & push job: trigger check, plan, render."""


@main.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("paths", nargs=-1)
@click.option("--paths-from", type=click.File("r"), default=None, help="Файл со списком путей (по одному в строке), '-' — stdin")
@click.option("--exit-code", is_flag=True, help="Код возврата 1, если триггер не сработал")
def check(job_file: str, paths, paths_from, exit_code: bool):
    """Проверить, сработает ли триггер на изменённые PATHS."""
    job = _load(job_file)

    changed = list(paths)
    if paths_from is not None:
        changed.extend(read_lines(paths_from.read()))

    decision, logs = trigger.should_fire(job.trigger, changed)
    for line in logs:
        click.echo(line, err=True)

    click.echo("fire" if decision.fired else "skip")
    for path in decision.matched_paths:
        click.echo(f"  + {path}")
    for path in decision.excluded_paths:
        click.echo(f"  - {path}")

    if exit_code and not decision.fired:
        raise click.exceptions.Exit(1)


@main.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--branch", envvar=config.BRANCH_VAR, default=None, help="Ветка push'а")
@click.option(
    "--execution-number",
    type=click.IntRange(min=0),
    envvar=config.EXECUTION_NUMBER_VAR,
    required=True,
    help="Порядковый номер запуска",
)
@click.option("--changed", multiple=True, help="Изменённый путь (можно несколько раз)")
@click.option("--repo", type=click.Path(exists=True, file_okay=False), default=None, help="Взять изменения из локального git-репозитория")
@click.option("--before", default=None, help="Ревизия до push'а (по умолчанию — родитель --after)")
@click.option("--after", default="HEAD", show_default=True, help="Ревизия после push'а")
@click.option("--var", "variables", multiple=True, help="Доп. переменная для тегов KEY=VALUE")
@click.option("--format", "fmt", type=click.Choice(["text", "json"]), default="text", show_default=True)
@click.option("-v", "--verbose", is_flag=True, help="Печатать логи шагов")
def plan(job_file, branch, execution_number, changed, repo, before, after, variables, fmt, verbose):
    """Построить план docker build/push для одного push'а."""
    job = _load(job_file)

    try:
        extra = parse_vars(variables)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--var")

    if repo and changed:
        raise click.UsageError("Укажите либо --changed, либо --repo, но не оба сразу.")

    core = PushJobCore(job, default_branch=config.DEFAULT_BRANCH)
    if repo:
        try:
            event = core.read_event(repo, before=before, after=after, branch=branch)
        except GitExceptions as e:
            _fail(e.logs)
    else:
        if not branch:
            raise click.UsageError(
                f"Не указана ветка: передайте --branch или переменную {config.BRANCH_VAR}."
            )
        event = PushEvent(branch=branch, changed_paths=list(changed))

    response = core.evaluate(event, execution_number, extra)

    if fmt == "json":
        click.echo(response.model_dump_json(indent=2))
    else:
        if verbose:
            for line in response.logs:
                click.echo(line, err=True)
        if response.summary is not None:
            click.echo(response.summary.description)
        if response.plan is not None:
            for line in response.plan.script():
                click.echo(line)

    for warning in response.warnings:
        click.echo(f"WARNING: {warning}", err=True)

    if response.status == "error":
        if not verbose and fmt == "text":
            for line in response.logs[-2:]:
                click.echo(line, err=True)
        raise click.exceptions.Exit(1)


@main.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--type", "render_type", type=click.Choice(settings.RENDER_TYPES), default="space", show_default=True, help="Формат результата")
@click.option("-o", "--output", default=".", help="Путь к директории, куда сохранить результат")
def render(job_file: str, render_type: str, output: str):
    """Сохранить описание job'а в формате space/gitlab/yaml."""
    click.echo(settings.LOGO + "\n", err=True)

    job = _load(job_file)
    template = RENDERS[render_type](job)
    if render_type == "gitlab":
        for warning in gitlab_render.limitations(job):
            click.echo(f"WARNING: {warning}", err=True)

    click.echo(template)

    target = output_path(output, settings.DEFAULT_NAMES[render_type])
    try:
        with open(target, "w", encoding="utf-8") as f:
            f.write(template)
    except OSError as e:
        click.echo(f"Не удалось сохранить результат в файл '{target}': {e}", err=True)
        raise click.exceptions.Exit(1)
    else:
        click.echo(f"Результат сохранён в файл: {target}", err=True)


if __name__ == "__main__":
    main()
