import os

"""
Базовые настройки запуска.

Имена переменных окружения, из которых CLI берёт номер запуска и ветку,
совпадают с теми, что выставляет JetBrains Space. Любое из них можно
переопределить через PUSHJOB_* переменные.
"""

EXECUTION_NUMBER_VAR = os.getenv(
    "PUSHJOB_EXECUTION_NUMBER_VAR", "JB_SPACE_EXECUTION_NUMBER"
)
BRANCH_VAR = os.getenv("PUSHJOB_BRANCH_VAR", "BRANCH")

# Ветка по умолчанию, если репозиторий в состоянии detached HEAD
DEFAULT_BRANCH = os.getenv("PUSHJOB_DEFAULT_BRANCH", "main")

DOCKER_BIN = os.getenv("PUSHJOB_DOCKER_BIN", "docker")

# Переменные, доступные в шаблонах тегов
# $N — короткая форма номера запуска: "version-0.$N"
EXECUTION_NUMBER_ALIASES = ("JB_SPACE_EXECUTION_NUMBER", "EXECUTION_NUMBER", "N")
BRANCH_ALIASES = ("BRANCH",)
FULL_BRANCH_ALIASES = ("JB_SPACE_GIT_BRANCH",)

# docker build: период CFS-квоты в микросекундах
CPU_PERIOD_US = 100_000
