from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Pattern, Tuple

from pushjob.core.exceptions import PatternError
from pushjob.core.models import TriggerDecision


# Один сегмент ** целиком: "ноль или больше директорий" / "всё, что ниже"
_ANY_DIRS = r"(?:[^/]+/)*"
_ANY_TAIL = r"[^/]+(?:/[^/]+)*"


def normalize_path(path: str) -> str:
    """
    Приводим путь к виду "a/b/c": слеши вперёд, без ./ и / в начале.
    """
    path = path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    path = path.lstrip("/")
    # a//b -> a/b
    return re.sub(r"/{2,}", "/", path)


def _translate_segment(segment: str, pattern: str) -> str:
    """
    Переводим один сегмент glob'а в regex. * и ? не пересекают "/".
    """
    out: List[str] = []
    i = 0
    n = len(segment)
    while i < n:
        ch = segment[i]
        if ch == "*":
            # "a**b" внутри сегмента — то же самое, что "a*b"
            while i < n and segment[i] == "*":
                i += 1
            out.append("[^/]*")
            continue
        if ch == "?":
            out.append("[^/]")
        elif ch == "[":
            end = segment.find("]", i + 2 if segment[i + 1:i + 2] in ("!", "^") else i + 1)
            if end == -1:
                raise PatternError(pattern, "unbalanced '['")
            body = segment[i + 1:end]
            if body[:1] in ("!", "^"):
                body = "^" + body[1:]
            body = body.replace("\\", "\\\\")
            out.append(f"(?!/)[{body}]")
            i = end + 1
            continue
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


def glob_to_regex(pattern: str) -> str:
    """
    Строит regex для glob-шаблона, привязанного к корню репозитория.

    Правила:
      - * и ? работают в пределах одного сегмента пути;
      - [..] — класс символов, [!..] — отрицание;
      - сегмент ** посреди шаблона = ноль или больше директорий,
        в конце шаблона = один или больше сегментов ("всё внутри");
      - "docs/" = "docs/**".
    """
    if not pattern or not pattern.strip():
        raise PatternError(pattern, "empty pattern")

    normalized = normalize_path(pattern)
    if not normalized:
        raise PatternError(pattern, "pattern has no path segments")
    if normalized.endswith("/"):
        normalized += "**"

    parts = normalized.split("/")
    regex: List[str] = []
    for idx, part in enumerate(parts):
        last = idx == len(parts) - 1
        if part == "**":
            regex.append(_ANY_TAIL if last else _ANY_DIRS)
        else:
            regex.append(_translate_segment(part, pattern))
            if not last:
                regex.append("/")
    return "".join(regex)


@lru_cache(maxsize=512)
def compile_glob(pattern: str, case_sensitive: bool = True) -> Pattern[str]:
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(glob_to_regex(pattern) + r"\Z", flags)
    except re.error as e:
        raise PatternError(pattern, str(e))


def matches_any(path: str, patterns: Iterable[str], case_sensitive: bool = True) -> bool:
    return any(
        compile_glob(pattern, case_sensitive).match(path) for pattern in patterns
    )


def classify_path(trigger, path: str) -> str:
    """
    Возвращает "excluded", "matched" или "ignored" для одного пути.
    Exclude проверяется первым и побеждает независимо от порядка объявления.
    """
    path = normalize_path(path)
    if matches_any(path, trigger.exclude_patterns, trigger.case_sensitive):
        return "excluded"
    if not trigger.include_patterns:
        return "matched"
    if matches_any(path, trigger.include_patterns, trigger.case_sensitive):
        return "matched"
    return "ignored"


def should_fire(trigger, changed_paths: Iterable[str]) -> Tuple[TriggerDecision, List[str]]:
    """
    Решает, должен ли job запуститься на данный набор изменённых путей.

    Возвращает (TriggerDecision, logs).
    """
    logs: List[str] = []
    paths = sorted({normalize_path(p) for p in changed_paths if normalize_path(p)})

    matched: List[str] = []
    excluded: List[str] = []
    ignored: List[str] = []

    if not paths:
        logs.append("Список изменённых путей пуст — триггер не срабатывает.")
        return TriggerDecision(fired=False), logs

    for path in paths:
        verdict = classify_path(trigger, path)
        if verdict == "excluded":
            excluded.append(path)
        elif verdict == "matched":
            matched.append(path)
        else:
            ignored.append(path)

    if excluded:
        logs.append("Исключены фильтром: " + ", ".join(excluded))
    if ignored:
        logs.append("Не подходят ни под один include-шаблон: " + ", ".join(ignored))

    fired = bool(matched)
    if fired:
        logs.append("Триггер сработал на: " + ", ".join(matched))
    else:
        logs.append("Ни один путь не прошёл фильтр — триггер не срабатывает.")

    return (
        TriggerDecision(
            fired=fired,
            matched_paths=matched,
            excluded_paths=excluded,
            ignored_paths=ignored,
        ),
        logs,
    )
