# apps/core/management/commands/verificar_ordem.py

from django.core.management.base import BaseCommand, CommandError

from apps.board.ordenacao import ordens_duplicadas
from apps.core.models import Board, Coluna


class Command(BaseCommand):
    help = 'Procura escopos com posições (ordem) repetidas'

    def add_arguments(self, parser):
        parser.add_argument(
            '--board',
            type=int,
            help='Verificar apenas o board informado'
        )

    def handle(self, *args, **options):
        boards = Board.objects.all()
        if options['board'] is not None:
            boards = boards.filter(id=options['board'])
            if not boards.exists():
                raise CommandError(f"Board {options['board']} não encontrado")

        problemas = []
        for board in boards.prefetch_related('colunas__cards'):
            colunas = list(board.colunas.all())

            repetidas = ordens_duplicadas(colunas)
            if repetidas:
                problemas.append(f'board {board.id} ({board.titulo}): colunas com ordem {repetidas}')

            for coluna in colunas:
                repetidas = ordens_duplicadas(coluna.cards.all())
                if repetidas:
                    problemas.append(f'coluna {coluna.id} ({coluna.titulo}): cards com ordem {repetidas}')

        if problemas:
            for problema in problemas:
                self.stdout.write(self.style.ERROR(f'  ❌ {problema}'))
            raise CommandError(f'{len(problemas)} escopo(s) com ordem repetida')

        total_colunas = Coluna.objects.filter(board__in=boards).count()
        self.stdout.write(
            self.style.SUCCESS(f'✅ Ordem consistente em {boards.count()} board(s) e {total_colunas} coluna(s)')
        )
