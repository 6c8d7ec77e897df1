# apps/core/__init__.py

"""
Core - Aplicação principal do Raia

Contém:
- Models (Usuario, Board, Coluna, Card) com base ordenável comum
- Signals (colunas padrão de um board novo)
- Comandos de seed e verificação de ordem
"""
