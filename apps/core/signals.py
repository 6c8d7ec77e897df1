# apps/core/signals.py

import logging

from django.conf import settings
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Board, Card, Coluna

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Board)
def criar_colunas_padrao(sender, instance, created, **kwargs):
    """
    Cria as colunas padrão quando um novo board é criado

    Cada coluna entra pelo fim do board, como uma coluna criada
    manualmente.
    """
    if not created or kwargs.get('raw') or instance.colunas.exists():
        return

    from apps.board.posicionamento import inserir_no_fim

    for titulo in getattr(settings, 'RAIA_COLUNAS_PADRAO', []):
        inserir_no_fim(Coluna, instance.id, titulo=titulo)

    logger.info(f"📋 Board {instance.id} criado com {instance.colunas.count()} coluna(s) padrão")


@receiver(post_delete, sender=Card)
def registrar_exclusao_card(sender, instance, **kwargs):
    """
    A exclusão não renumera os irmãos; a lacuna deixada é válida
    """
    logger.info(f"🗑️ Card {instance.id} excluído da coluna {instance.coluna_id} (ordem {instance.ordem})")
