# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.board.posicionamento import inserir_no_topo
from apps.core.models import Board, Card, Usuario

CARDS_DEMO = {
    'Backlog': ['Mapear fluxo de cadastro', 'Definir métricas do quadro', 'Revisar textos da home'],
    'Em Progresso': ['Endpoint de reordenação', 'Arraste por teclado'],
    'Em Revisão': ['Ajustar limite WIP da revisão'],
    'Concluído': ['Configurar WebSockets'],
}


class Command(BaseCommand):
    help = 'Cria um board de demonstração com colunas e cards'

    def add_arguments(self, parser):
        parser.add_argument(
            '--titulo',
            default='Board de Demonstração',
            help='Título do board criado'
        )
        parser.add_argument(
            '--usuario',
            default='demo',
            help='Username do dono do board (criado se não existir)'
        )

    def handle(self, *args, **options):
        self.stdout.write('🌱 Criando dados de demonstração...')

        with transaction.atomic():
            usuario, criado = Usuario.objects.get_or_create(
                username=options['usuario'],
                defaults={'first_name': 'Demo', 'email': f"{options['usuario']}@raia.local"}
            )
            if criado:
                usuario.set_password('demo123')
                usuario.save()
                self.stdout.write(f'  👤 Usuário criado: {usuario.username} / demo123')

            # O signal cria as colunas padrão
            board = Board.objects.create(titulo=options['titulo'], criado_por=usuario)
            self.stdout.write(f'  📋 Board criado: {board.titulo}')

            total = 0
            for coluna in board.colunas_ordenadas():
                # Inserção no topo: o último da lista termina em primeiro
                for titulo in reversed(CARDS_DEMO.get(coluna.titulo, [])):
                    inserir_no_topo(Card, coluna.id, titulo=titulo, responsavel=usuario)
                    total += 1

        self.stdout.write(
            self.style.SUCCESS(
                f'✅ Board {board.id} pronto: {board.colunas.count()} coluna(s), {total} card(s)'
            )
        )
