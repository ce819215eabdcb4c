import yaml

from pushjob.model import JobDefinition


def render(job: JobDefinition) -> str:
    """
    Сохраняет JobDefinition в собственный YAML-формат (camelCase-ключи).
    """
    payload = job.model_dump(by_alias=True)
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
