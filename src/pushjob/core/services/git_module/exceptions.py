from typing import List, Optional

from pushjob.exception import CLIException


class GitExceptions(CLIException):
    """
    Базовое исключение чтения push-события из локального git-репозитория.

    Дополнительно хранит логи (steps), накопленные во время операции.
    """

    def __init__(
        self,
        *args,
        description: str = "Failed to read push event from git repository",
        logs: Optional[List[str]] = None,
    ) -> None:
        super().__init__(*args, description=description)
        self.logs: List[str] = logs or []


class GitRepositoryError(GitExceptions):
    """
    Путь не существует или не является git-репозиторием.
    """

    def __init__(
        self,
        path: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Error to open git repository {path}"
        super().__init__(*args, description=description, logs=logs)
        self.path = path


class GitRevisionError(GitExceptions):
    """
    Ревизию (коммит/ветку/тег) не удалось разрешить.
    """

    def __init__(
        self,
        revision: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Error to resolve revision {revision}"
        super().__init__(*args, description=description, logs=logs)
        self.revision = revision
