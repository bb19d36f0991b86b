"""
Substituição de placeholders em caminhos de assets.

Backends expõem tokens como `<GOPATH>` ou `<INSTALLPATH>` que o usuário pode
usar em asset specs e excludes; este módulo os troca pelos caminhos reais.
"""

from __future__ import annotations

from typing import Mapping


def substitute(path: str, mapping: Mapping[str, str]) -> str:
    """
    Substitui toda ocorrência de cada token de `mapping` pelo seu valor.

    A substituição é literal e sem efeitos colaterais. Pré-condição (não
    verificada): nenhum valor de substituição contém um token, o que torna a
    ordem de aplicação irrelevante e a função idempotente.
    """
    new_path = path
    for placeholder, replacement in mapping.items():
        new_path = new_path.replace(placeholder, replacement)
    return new_path
