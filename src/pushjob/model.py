import re

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List

from pushjob.core.services.trigger.core import compile_glob


_CPU_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*\.?\s*(cpu|mcpu)?\s*$", re.IGNORECASE)
_MEMORY_RE = re.compile(
    r"^\s*(\d+(?:\.\d+)?)\s*\.?\s*(mib|gib|mb|gb|mi|gi|m|g)?\s*$", re.IGNORECASE
)
_GIB_UNITS = {"gib", "gb", "gi", "g"}


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _stringify_mapping(value: Any) -> Any:
    # YAML охотно превращает значения меток в int/bool — приводим к строкам
    if isinstance(value, dict):
        return {
            str(k): (str(v).lower() if isinstance(v, bool) else str(v))
            for k, v in value.items()
        }
    return value


class TriggerSpec(BaseModel):
    """
    Фильтр путей push-события.

    Путь подходит, если он совпадает хотя бы с одним include-шаблоном
    и ни с одним exclude-шаблоном. Пустой include = "всё, что не исключено".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    exclude_patterns: List[str] = Field(default_factory=list, alias="excludePatterns")
    include_patterns: List[str] = Field(default_factory=list, alias="includePatterns")
    case_sensitive: bool = Field(default=True, alias="caseSensitive")

    @field_validator("exclude_patterns", "include_patterns")
    @classmethod
    def _check_patterns(cls, patterns: List[str]) -> List[str]:
        patterns = _dedupe(patterns)
        for pattern in patterns:
            # битый glob должен падать при загрузке, а не при первом push'е
            compile_glob(pattern)
        return patterns


class ResourcesSpec(BaseModel):
    """
    Потолок ресурсов для шага сборки.
    cpu    — в единицах CPU (0.5 = 500.mcpu)
    memory — в мегабайтах
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    cpu: float = 1.0
    memory: int = 2048

    @field_validator("cpu", mode="before")
    @classmethod
    def _parse_cpu(cls, value: Any) -> Any:
        if isinstance(value, str):
            m = _CPU_RE.match(value)
            if not m:
                raise ValueError(f"unsupported CPU quantity {value!r}")
            amount = float(m.group(1))
            if (m.group(2) or "").lower() == "mcpu":
                amount /= 1000
            return amount
        return value

    @field_validator("memory", mode="before")
    @classmethod
    def _parse_memory(cls, value: Any) -> Any:
        if isinstance(value, str):
            m = _MEMORY_RE.match(value)
            if not m:
                raise ValueError(f"unsupported memory quantity {value!r}")
            amount = float(m.group(1))
            if (m.group(2) or "").lower() in _GIB_UNITS:
                amount *= 1024
            return int(round(amount))
        return value

    @field_validator("cpu", "memory")
    @classmethod
    def _check_positive(cls, value):
        if value <= 0:
            raise ValueError("resource quantity must be positive")
        return value

    @field_validator("cpu")
    @classmethod
    def _round_cpu(cls, value: float) -> float:
        # точность CPU — 1.mcpu, как в Space
        value = round(value, 3)
        if value <= 0:
            raise ValueError("CPU quantity must be at least 1.mcpu")
        return value


class BuildSpec(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    context: str = "."
    dockerfile_path: str = Field(
        default="Dockerfile",
        validation_alias=AliasChoices("dockerfilePath", "dockerfile_path", "file"),
        serialization_alias="dockerfilePath",
    )
    labels: Dict[str, str] = Field(default_factory=dict)
    args: Dict[str, str] = Field(default_factory=dict)

    @field_validator("labels", "args", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _stringify_mapping(value)

    @field_validator("context", "dockerfile_path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("path must not be empty")
        return value.strip()

    @field_validator("labels", "args")
    @classmethod
    def _check_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        for key in value:
            if not key.strip():
                raise ValueError("keys must not be empty")
        return value


class PushSpec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    repository: str
    tags: List[str] = Field(min_length=1)

    @field_validator("repository")
    @classmethod
    def _check_repository(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("repository must not be empty")
        if any(ch.isspace() for ch in value):
            raise ValueError("repository must not contain whitespace")
        if "://" in value:
            raise ValueError("repository must not contain a URL scheme")
        # host:port допустим, а вот repo:tag и @digest — нет
        if "/" in value and ":" in value.rsplit("/", 1)[-1]:
            raise ValueError("repository must not include a tag, use push.tags")
        if "@" in value:
            raise ValueError("repository must not include a digest")
        return value

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, tags: List[str]) -> List[str]:
        for tag in tags:
            if not tag.strip():
                raise ValueError("tag templates must not be empty")
        return [tag.strip() for tag in tags]


class JobDefinition(BaseModel):
    """
    Описание одного job'а "собрать и запушить образ по push'у".
    Создаётся человеком, читается один раз на каждое push-событие,
    в рантайме не меняется.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    trigger: TriggerSpec = Field(default_factory=TriggerSpec)
    resources: ResourcesSpec = Field(default_factory=ResourcesSpec)
    build: BuildSpec = Field(default_factory=BuildSpec)
    push: PushSpec

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("job name must not be empty")
        return value.strip()
