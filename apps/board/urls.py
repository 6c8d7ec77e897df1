# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Boards
    path('novo/', views.criar_board, name='criar_board'),
    path('<int:board_id>/', views.board_estado_view, name='estado'),

    # Colunas
    path('<int:board_id>/colunas/', views.criar_coluna, name='criar_coluna'),
    path('<int:board_id>/colunas/reordenar/', views.reordenar_colunas, name='reordenar_colunas'),
    path('colunas/<int:coluna_id>/limite-wip/', views.atualizar_limite_wip, name='limite_wip'),
    path('colunas/<int:coluna_id>/excluir/', views.excluir_coluna, name='excluir_coluna'),

    # Cards
    path('colunas/<int:coluna_id>/cards/', views.criar_card, name='criar_card'),
    path('colunas/<int:coluna_id>/cards/reordenar/', views.reordenar_cards, name='reordenar_cards'),
    path('cards/<int:card_id>/reatribuir/', views.reatribuir_card, name='reatribuir_card'),
    path('cards/<int:card_id>/mover/', views.mover_card, name='mover_card'),
    path('cards/<int:card_id>/excluir/', views.excluir_card, name='excluir_card'),
]
