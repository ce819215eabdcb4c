from typing import Dict, Iterable, List


def output_path(output: str, filename: str) -> str:
    return output + ("" if output[-1:] == "/" else "/") + filename


def parse_vars(items: Iterable[str]) -> Dict[str, str]:
    """
    KEY=VALUE -> {"KEY": "VALUE"}. Без "=" — ValueError.
    """
    result: Dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected KEY=VALUE, got {item!r}")
        result[key.strip()] = value
    return result


def read_lines(text: str) -> List[str]:
    # пустые строки и #-комментарии пропускаем
    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]
