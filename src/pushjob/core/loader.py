from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml
from pydantic import ValidationError

from pushjob.core.exceptions import JobDefinitionError
from pushjob.core.services.space_dsl.parser import parse_space_job
from pushjob.model import JobDefinition


YAML_SUFFIXES = (".yml", ".yaml")
JSON_SUFFIXES = (".json",)
SPACE_SUFFIXES = (".kts",)


def _validation_logs(error: ValidationError) -> List[str]:
    logs: List[str] = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        logs.append(f"{location}: {item['msg']}")
    return logs


def _load_mapping(path: Path, text: str) -> Dict[str, Any]:
    suffix = path.suffix.lower()
    try:
        if suffix in YAML_SUFFIXES:
            payload = yaml.safe_load(text)
        else:
            payload = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise JobDefinitionError(str(path), "cannot parse file", logs=[str(e)])

    if not isinstance(payload, Mapping):
        raise JobDefinitionError(str(path), "file must contain a mapping")
    return dict(payload)


def job_from_mapping(payload: Mapping, source: str = "<mapping>") -> JobDefinition:
    try:
        return JobDefinition.model_validate(dict(payload))
    except ValidationError as e:
        raise JobDefinitionError(source, "schema validation failed", logs=_validation_logs(e))


def load_job_definition(path: Union[str, Path]) -> Tuple[JobDefinition, List[str]]:
    """
    Загружает описание job'а из файла.

    Поддерживаемые форматы: .yml/.yaml, .json, .space.kts (Kotlin DSL Space).

    Возвращает (JobDefinition, warnings).
    :raises JobDefinitionError: файл не найден, формат не поддерживается
                               или описание не проходит валидацию.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES + JSON_SUFFIXES + SPACE_SUFFIXES:
        raise JobDefinitionError(
            str(path),
            "unsupported format, expected one of .yml, .yaml, .json, .kts",
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise JobDefinitionError(str(path), "cannot read file", logs=[str(e)])

    if suffix in SPACE_SUFFIXES:
        try:
            return parse_space_job(text)
        except ValidationError as e:
            raise JobDefinitionError(
                str(path), "schema validation failed", logs=_validation_logs(e)
            )

    return job_from_mapping(_load_mapping(path, text), source=str(path)), []
