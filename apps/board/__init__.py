# apps/board/__init__.py

"""
Board - ordenação persistente e arraste do Raia

Funcionalidades:
- Reordenação e movimento de colunas e cards (posição = índice)
- Reconciliação otimista do arraste no cliente
- WebSockets para sincronizar quem está olhando o mesmo board
"""
