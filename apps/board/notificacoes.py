# apps/board/notificacoes.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)


def grupo_board(board_id):
    return f'board_{board_id}'


def notificar_board(board_id, motivo, usuario=None, **dados):
    """
    Avisa os clientes conectados ao board que o estado persistido mudou

    Os clientes respondem com uma nova leitura do board, o que também
    encerra qualquer divergência do estado otimista local.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    mensagem = {
        'motivo': motivo,
        'usuario': (usuario.get_full_name() or usuario.username) if usuario else None,
        'timestamp': timezone.now().isoformat(),
        **dados,
    }
    async_to_sync(channel_layer.group_send)(
        grupo_board(board_id),
        {'type': 'board_atualizado', 'message': mensagem}
    )
    logger.debug(f"📣 board_{board_id}: {motivo}")
