from pathlib import Path
from typing import Iterable, List, Union


PathLike = Union[str, Path]


def collect_diff_paths(diff_index: Iterable) -> List[str]:
    """
    Собирает пути из git.DiffIndex:
    - для переименований учитываем и старый, и новый путь,
    - для удалённых файлов b_path пустой — берём a_path.
    Результат отсортирован и без повторов.
    """
    paths = set()
    for diff in diff_index:
        if diff.a_path:
            paths.add(diff.a_path)
        if diff.b_path:
            paths.add(diff.b_path)
    return sorted(paths)


def tree_paths(tree) -> List[str]:
    """
    Все файлы дерева коммита — для корневого коммита, где не с чем сравнивать.
    """
    return sorted(item.path for item in tree.traverse() if item.type == "blob")
