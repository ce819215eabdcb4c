from typing import List, Optional

from pushjob.exception import CLIException


class JobExceptions(CLIException):
    """
    Базовое исключение для ошибок в описании job'а.

    Дополнительно хранит логи (steps), накопленные во время операции.
    """

    def __init__(
        self,
        *args,
        description: str = "Something happend when read job definition",
        logs: Optional[List[str]] = None,
    ) -> None:
        super().__init__(*args, description=description)
        self.logs: List[str] = logs or []


class JobDefinitionError(JobExceptions):
    """
    Файл описания job'а не читается, формат не поддерживается
    или содержимое не проходит валидацию схемы.
    """

    def __init__(
        self,
        source: str,
        reason: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Invalid job definition {source}: {reason}"
        super().__init__(*args, description=description, logs=logs)
        self.source = source
        self.reason = reason


class PatternError(JobExceptions):
    """
    Некорректный glob-шаблон в фильтре путей.
    """

    def __init__(
        self,
        pattern: str,
        reason: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Malformed glob pattern {pattern!r}: {reason}"
        super().__init__(*args, description=description, logs=logs)
        self.pattern = pattern
        self.reason = reason


class TemplateError(JobExceptions):
    """
    Шаблон тега ссылается на неизвестную переменную или содержит битый `$`.
    """

    def __init__(
        self,
        template: str,
        reason: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Cannot resolve tag template {template!r}: {reason}"
        super().__init__(*args, description=description, logs=logs)
        self.template = template
        self.reason = reason


class SpaceDslError(JobExceptions):
    """
    Синтаксическая ошибка в .space.kts файле.
    """

    def __init__(
        self,
        line: int,
        reason: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Space DSL syntax error at line {line}: {reason}"
        super().__init__(*args, description=description, logs=logs)
        self.line = line
        self.reason = reason
