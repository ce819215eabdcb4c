from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pushjob.core.exceptions import SpaceDslError
from pushjob.model import JobDefinition


# Поддерживаем только то подмножество Kotlin DSL Space Automation,
# которое описывает push-триггер + docker build/push.
_TOKEN_RE = re.compile(
    "|".join(
        [
            r"(?P<ws>[ \t\r\f\v]+)",
            r"(?P<nl>\n)",
            r"(?P<comment>//[^\n]*)",
            r"(?P<block>/\*.*?\*/)",
            r'(?P<raw>""")',
            r'(?P<string>"(?:[^"\\\n]|\\.)*")',
            r"(?P<number>\d+(?:\.\d+)?)",
            r"(?P<ident>[A-Za-z_][A-Za-z0-9_]*)",
            r"(?P<punct>[{}()\[\]=,.+\-;])",
        ]
    ),
    re.DOTALL,
)

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "$": "$",
    "'": "'",
    "n": "\n",
    "t": "\t",
    "r": "\r",
}


@dataclass
class Token:
    kind: str
    value: str
    line: int


@dataclass
class Ref:
    """Ссылка на идентификатор (переменную Kotlin) — её значение мы не знаем."""
    name: str


Value = Union[str, Ref]


@dataclass
class Call:
    name: str
    args: List[Value]
    body: Optional[List["Node"]]
    line: int


@dataclass
class Assign:
    target: str
    key: Optional[str]
    value: Value
    line: int


@dataclass
class Filter:
    sign: str
    pattern: str
    line: int


Node = Union[Call, Assign, Filter]


def _decode_string(raw: str, line: int) -> str:
    body = raw[1:-1]
    out: List[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            nxt = body[i + 1:i + 2]
            if nxt not in _ESCAPES:
                raise SpaceDslError(line, f"unsupported escape sequence '\\{nxt}'")
            out.append(_ESCAPES[nxt])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def tokenize(text: str) -> Iterator[Token]:
    line = 1
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise SpaceDslError(line, f"unexpected character {text[pos]!r}")
        kind = m.lastgroup
        value = m.group()
        if kind == "raw":
            raise SpaceDslError(line, "raw strings are not supported")
        if kind == "string":
            yield Token("string", _decode_string(value, line), line)
        elif kind in ("number", "ident", "punct"):
            yield Token(kind, value, line)
        line += value.count("\n")
        pos = m.end()
    yield Token("eof", "", line)


class _Parser:
    def __init__(self, tokens: Iterator[Token]) -> None:
        self.tokens = list(tokens)
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _is(self, kind: str, value: Optional[str] = None) -> bool:
        tok = self.current
        return tok.kind == kind and (value is None or tok.value == value)

    def _expect(self, kind: str, value: Optional[str] = None) -> Token:
        if not self._is(kind, value):
            tok = self.current
            wanted = value or kind
            got = tok.value or tok.kind
            raise SpaceDslError(tok.line, f"expected {wanted!r}, got {got!r}")
        return self._advance()

    def parse(self) -> List[Node]:
        nodes = self._statements()
        self._expect("eof")
        return nodes

    def _statements(self) -> List[Node]:
        nodes: List[Node] = []
        while not self._is("eof") and not self._is("punct", "}"):
            if self._is("punct", ";"):
                self._advance()
                continue
            nodes.append(self._statement())
        return nodes

    def _statement(self) -> Node:
        tok = self.current
        if tok.kind == "punct" and tok.value in ("+", "-"):
            self._advance()
            pattern = self._expect("string")
            return Filter(sign=tok.value, pattern=pattern.value, line=tok.line)

        name = self._expect("ident")
        if self._is("punct", "="):
            self._advance()
            return Assign(target=name.value, key=None, value=self._value(), line=name.line)
        if self._is("punct", "["):
            self._advance()
            key = self._expect("string")
            self._expect("punct", "]")
            self._expect("punct", "=")
            return Assign(target=name.value, key=key.value, value=self._value(), line=name.line)

        args: List[Value] = []
        if self._is("punct", "("):
            self._advance()
            while not self._is("punct", ")"):
                args.append(self._value())
                if not self._is("punct", ")"):
                    self._expect("punct", ",")
            self._expect("punct", ")")

        body: Optional[List[Node]] = None
        if self._is("punct", "{"):
            self._advance()
            body = self._statements()
            self._expect("punct", "}")
        return Call(name=name.value, args=args, body=body, line=name.line)

    def _value(self) -> Value:
        tok = self.current
        if tok.kind == "string":
            self._advance()
            return tok.value
        if tok.kind == "number":
            self._advance()
            # 4.cpu, 3000.mb
            if self._is("punct", ".") and self.tokens[self.pos + 1].kind == "ident":
                self._advance()
                unit = self._advance()
                return f"{tok.value}.{unit.value}"
            return tok.value
        if tok.kind == "ident":
            self._advance()
            return Ref(tok.value)
        raise SpaceDslError(tok.line, f"expected a value, got {tok.value or tok.kind!r}")


def parse_nodes(text: str) -> List[Node]:
    return _Parser(tokenize(text)).parse()


def _string_arg(call: Call, warnings: List[str]) -> str:
    if not call.args or not isinstance(call.args[0], str):
        raise SpaceDslError(call.line, f"{call.name}(...) expects a string literal argument")
    if len(call.args) > 1:
        warnings.append(f"Строка {call.line}: лишние аргументы {call.name}(...) проигнорированы.")
    return call.args[0]


def _literal(node: Assign, warnings: List[str]) -> Optional[str]:
    if isinstance(node.value, Ref):
        warnings.append(
            f"Строка {node.line}: {node.target} ссылается на переменную "
            f"{node.value.name!r} — значение не поддерживается и пропущено."
        )
        return None
    return node.value


def _ignored(node: Node, scope: str, warnings: List[str]) -> None:
    what = getattr(node, "name", None) or getattr(node, "target", None) or "filter"
    warnings.append(f"Строка {node.line}: {scope} {what!r} не поддерживается и пропущен.")


def _read_path_filter(body: List[Node], trigger: Dict[str, Any], warnings: List[str]) -> None:
    for node in body:
        if isinstance(node, Filter):
            key = "excludePatterns" if node.sign == "-" else "includePatterns"
            trigger[key].append(node.pattern)
        elif isinstance(node, Assign) and node.key is None and node.target == "caseSensitive":
            if not isinstance(node.value, Ref) or node.value.name not in ("true", "false"):
                raise SpaceDslError(node.line, "caseSensitive expects true or false")
            trigger["caseSensitive"] = node.value.name == "true"
        else:
            _ignored(node, "в pathFilter элемент", warnings)


def _read_start_on(body: List[Node], trigger: Dict[str, Any], warnings: List[str]) -> None:
    for node in body:
        if isinstance(node, Call) and node.name == "gitPush":
            for inner in node.body or []:
                if isinstance(inner, Call) and inner.name == "pathFilter":
                    _read_path_filter(inner.body or [], trigger, warnings)
                else:
                    _ignored(inner, "в gitPush элемент", warnings)
        else:
            _ignored(node, "триггер", warnings)


def _read_resources(body: List[Node], resources: Dict[str, Any], warnings: List[str]) -> None:
    for node in body:
        if isinstance(node, Assign) and node.key is None and node.target in ("cpu", "memory"):
            value = _literal(node, warnings)
            if value is not None:
                resources[node.target] = value
        else:
            _ignored(node, "в resources параметр", warnings)


def _read_build(body: List[Node], build: Dict[str, Any], warnings: List[str]) -> None:
    for node in body:
        if isinstance(node, Assign) and node.key is None and node.target in ("context", "file"):
            value = _literal(node, warnings)
            if value is not None:
                build["context" if node.target == "context" else "dockerfilePath"] = value
        elif isinstance(node, Assign) and node.key is not None and node.target in ("labels", "args"):
            value = _literal(node, warnings)
            if value is not None:
                build.setdefault(node.target, {})[node.key] = value
        else:
            _ignored(node, "в build параметр", warnings)


def _read_push(call: Call, warnings: List[str]) -> Dict[str, Any]:
    push: Dict[str, Any] = {"repository": _string_arg(call, warnings), "tags": []}
    for node in call.body or []:
        if isinstance(node, Call) and node.name == "tags":
            for arg in node.args:
                if isinstance(arg, Ref):
                    raise SpaceDslError(node.line, "tags(...) expects string literals")
                push["tags"].append(arg)
        else:
            _ignored(node, "в push параметр", warnings)
    return push


def _read_docker(body: List[Node], data: Dict[str, Any], warnings: List[str]) -> None:
    for node in body:
        if not isinstance(node, Call):
            _ignored(node, "в docker параметр", warnings)
        elif node.name == "resources":
            _read_resources(node.body or [], data["resources"], warnings)
        elif node.name == "build":
            _read_build(node.body or [], data["build"], warnings)
        elif node.name == "push":
            if "push" in data:
                warnings.append(
                    f"Строка {node.line}: поддерживается один push(...) — "
                    "дополнительный блок пропущен."
                )
                continue
            data["push"] = _read_push(node, warnings)
        else:
            _ignored(node, "в docker блок", warnings)


def job_data_from_call(call: Call, warnings: List[str]) -> Dict[str, Any]:
    """
    Переводит разобранный блок job("...") { ... } в словарь для JobDefinition.
    """
    data: Dict[str, Any] = {
        "name": _string_arg(call, warnings),
        "trigger": {"excludePatterns": [], "includePatterns": []},
        "resources": {},
        "build": {},
    }
    for node in call.body or []:
        if isinstance(node, Call) and node.name == "startOn":
            _read_start_on(node.body or [], data["trigger"], warnings)
        elif isinstance(node, Call) and node.name == "docker":
            _read_docker(node.body or [], data, warnings)
        else:
            _ignored(node, "в job элемент", warnings)

    if "push" not in data:
        raise SpaceDslError(call.line, f"job {data['name']!r} has no docker push(...) block")
    return data


def parse_space_job(text: str) -> Tuple[JobDefinition, List[str]]:
    """
    Разбирает .space.kts и возвращает (JobDefinition, warnings).

    Если в файле несколько job'ов, берём первый и пишем предупреждение.
    Ошибки схемы (pydantic.ValidationError) пробрасываются как есть.
    """
    warnings: List[str] = []
    nodes = parse_nodes(text)

    jobs = [n for n in nodes if isinstance(n, Call) and n.name == "job"]
    for node in nodes:
        if node not in jobs:
            _ignored(node, "верхнеуровневый элемент", warnings)
    if not jobs:
        raise SpaceDslError(1, "no job(...) block found")
    if len(jobs) > 1:
        warnings.append(
            f"В файле {len(jobs)} job'ов — используется первый ({jobs[0].line} строка)."
        )

    data = job_data_from_call(jobs[0], warnings)
    return JobDefinition.model_validate(data), warnings
