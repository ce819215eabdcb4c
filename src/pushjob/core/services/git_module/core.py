from git import (
    Repo as GitRepo,
    InvalidGitRepositoryError,
    NoSuchPathError,
)
from git.exc import BadName

from pathlib import Path
from typing import List, Optional

from pushjob.core.config import DEFAULT_BRANCH

from .models import ChangeSet
from .utils import PathLike, collect_diff_paths, tree_paths
from .exceptions import GitRepositoryError, GitRevisionError


class GitPushReader:
    """
    Читает push-событие из локального git-репозитория (GitPython):

    - read_push(path, before, after, branch) — изменённые пути между двумя
      ревизиями и имя ветки.

    Если before не задан, сравниваем after с его первым родителем;
    у корневого коммита изменёнными считаются все файлы дерева.
    """

    def __init__(self, default_branch: str = DEFAULT_BRANCH) -> None:
        self.default_branch = default_branch

    def _open(self, path: Path, logs: List[str]) -> GitRepo:
        try:
            return GitRepo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logs.append(f"GitPython: {path} не является git-репозиторием ({e!r}).")
            raise GitRepositoryError(path=str(path), logs=logs)

    def _commit(self, repo: GitRepo, revision: str, logs: List[str]):
        try:
            return repo.commit(revision)
        except (BadName, ValueError) as e:
            logs.append(f"GitPython: не удалось разрешить ревизию {revision!r}: {e}")
            raise GitRevisionError(revision=revision, logs=logs)

    def _branch(self, repo: GitRepo, logs: List[str]) -> str:
        try:
            return repo.active_branch.name
        except TypeError:
            logs.append(
                f"HEAD в состоянии detached — используем ветку по умолчанию "
                f"{self.default_branch!r}."
            )
            return self.default_branch

    def read_push(
        self,
        path: PathLike,
        before: Optional[str] = None,
        after: str = "HEAD",
        branch: Optional[str] = None,
    ) -> ChangeSet:
        """
        :param path:   Путь до рабочей копии репозитория.
        :param before: Ревизия до push'а (по умолчанию — родитель after).
        :param after:  Ревизия после push'а.
        :param branch: Имя ветки; если не задано — активная ветка репозитория.
        :raises GitRepositoryError: путь не является git-репозиторием.
        :raises GitRevisionError:   ревизия не найдена.
        """
        logs: List[str] = []
        repo_path = Path(path)
        logs.append(f"Читаем push из репозитория {repo_path}")

        repo = self._open(repo_path, logs)
        try:
            after_commit = self._commit(repo, after, logs)

            if before is not None:
                before_commit = self._commit(repo, before, logs)
            elif after_commit.parents:
                before_commit = after_commit.parents[0]
            else:
                before_commit = None

            if before_commit is None:
                logs.append(
                    f"Коммит {after_commit.hexsha[:8]} корневой — все файлы считаем изменёнными."
                )
                changed = tree_paths(after_commit.tree)
            else:
                changed = collect_diff_paths(before_commit.diff(after_commit))
                logs.append(
                    f"Сравниваем {before_commit.hexsha[:8]}..{after_commit.hexsha[:8]}: "
                    f"{len(changed)} изменённых путей"
                )

            branch_name = branch or self._branch(repo, logs)
        finally:
            # Явно закрываем repo, чтобы на Windows не оставались залоченные файлы
            repo.close()

        return ChangeSet(
            repo_path=repo_path,
            branch=branch_name,
            after=after_commit.hexsha,
            before=before_commit.hexsha if before_commit is not None else None,
            changed_paths=changed,
            logs=logs,
        )
