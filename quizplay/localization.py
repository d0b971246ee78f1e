"""Resolucao de LocalizedText (string simples ou mapa idioma -> texto)."""

from __future__ import annotations

from .models.values import LocalizedText

DEFAULT_LANGUAGE = "en"


def resolve_text(
    text: LocalizedText | None,
    language: str | None = None,
    default_language: str = DEFAULT_LANGUAGE,
) -> str | None:
    """Resolve um LocalizedText para o idioma pedido.

    Ordem: idioma exato, idioma base ("pt" para "pt-BR"), idioma padrao,
    primeira traducao disponivel.
    """
    if text is None or isinstance(text, str):
        return text
    if not text:
        return None

    candidates = []
    if language:
        candidates.append(language)
        base = language.split("-")[0]
        if base != language:
            candidates.append(base)
    candidates.append(default_language)

    for candidate in candidates:
        if candidate in text:
            return text[candidate]

    return next(iter(text.values()))
