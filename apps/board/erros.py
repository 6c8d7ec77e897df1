# apps/board/erros.py


class ErroOrdenacao(Exception):
    """Erro base das operações de ordenação do board"""


class ReordenacaoInvalida(ErroOrdenacao):
    """
    Pedido de reordenação malformado

    Lançado antes de qualquer escrita: ids duplicados, conjunto de ids
    diferente dos membros do escopo ou escopo inexistente.
    """


class FalhaPersistencia(ErroOrdenacao):
    """Falha do banco durante a escrita; a transação foi desfeita"""
