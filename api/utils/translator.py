from typing import Callable, Dict, Optional, Union
import re

TemplateParams = Dict[str, Union[str, int]]
Translator = Callable[[str, str, Optional[TemplateParams]], str]

_TOKEN_RE = re.compile(r"\{(\w+)\}")


def format_template(template: str, params: Optional[TemplateParams] = None) -> str:
    if not params:
        return template

    def substitute(match):
        value = params.get(match.group(1))
        return "" if value is None else str(value)

    return _TOKEN_RE.sub(substitute, template)


def create_translator(t: Optional[Translator] = None) -> Translator:
    """
    Wrap an injected translator so generators can always call
    ``tr(key, fallback, params)``. Without one, the English fallback
    template is filled in directly.
    """

    def tr(key: str, fallback: str, params: Optional[TemplateParams] = None) -> str:
        if callable(t):
            return t(key, fallback, params)
        return format_template(fallback, params)

    return tr


def op_word(op: str, tr: Translator) -> str:
    if op == "+":
        return tr("question.word.add", "addition")
    return tr("question.word.sub", "subtraction")
