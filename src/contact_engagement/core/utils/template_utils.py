import re

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

# placeholders aceitos em português e inglês
_ALIASES = {
    "nome": "name",
    "idade": "age",
}


def render_message(template_str: str, context: dict) -> str:
    """
    Substitui placeholders no formato {var} pelos valores de `context`.

    Exemplo:
        render_message("Parabéns, {nome}! {idade} anos!", {"name": "Maria", "age": 30})
        → "Parabéns, Maria! 30 anos!"

    Placeholders desconhecidos ou com valor None permanecem no texto.
    """

    def _replace(match: re.Match) -> str:
        key = match.group(1)
        value = context.get(key)
        if value is None:
            value = context.get(_ALIASES.get(key, key))
        return match.group(0) if value is None else str(value)

    return _PLACEHOLDER_RE.sub(_replace, template_str or "")
