# apps/__init__.py

"""
Raia - Aplicações Django

Este pacote contém as aplicações do sistema:
- core: Models (Usuario, Board, Coluna, Card), admin e comandos
- board: Ordenação, arraste, endpoints JSON e WebSockets
"""

__version__ = '0.1.0'
