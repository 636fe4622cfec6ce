"""Default category set"""

import logging
from typing import List, Tuple

from sqlalchemy.orm import Session

from carteira_gateway.infrastructure.database.models import Category
from carteira_gateway.infrastructure.database.repositories import CategoryRepository

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: List[Tuple[str, str, Tuple[str, ...]]] = [
    ("Alimentação", "🍔", ("restaurante", "almoço", "almocei", "jantar", "jantei", "lanche", "lanchou", "pizza", "ifood", "padaria", "café")),
    ("Compras", "🛍️", ("roupa", "sapato", "tênis", "celular", "shopping", "presente", "loja", "eletrônico")),
    ("Contas", "🧾", ("luz", "água", "internet", "telefone", "gás", "boleto", "fatura", "conta")),
    ("Educação", "📚", ("curso", "livro", "faculdade", "escola", "mensalidade", "material")),
    ("Emergência", "🚨", ()),
    ("Lazer", "🎉", ("cinema", "show", "bar", "cerveja", "festa", "viagem", "netflix", "jogo")),
    ("Mercado", "🛒", ("mercado", "supermercado", "feira", "açougue", "hortifruti", "compras do mês")),
    ("Moradia", "🏠", ("aluguel", "condomínio", "iptu", "reforma", "móveis")),
    ("Outros", "📦", ()),
    ("Poupança", "🐷", ()),
    ("Saúde", "💊", ("farmácia", "remédio", "médico", "consulta", "exame", "dentista", "academia")),
    ("Transporte", "🚗", ("uber", "99", "táxi", "ônibus", "metrô", "gasolina", "combustível", "estacionamento", "pedágio")),
]


def seed_default_categories(db: Session) -> int:
    """Insert the default categories when the table is empty; returns how many were added"""
    if db.query(Category).count() > 0:
        return 0

    repo = CategoryRepository(db)
    for name, emoji, keywords in DEFAULT_CATEGORIES:
        repo.create(name=name, emoji=emoji, keywords=keywords)

    logger.info("Seeded default categories", extra={"count": len(DEFAULT_CATEGORIES)})
    return len(DEFAULT_CATEGORIES)
