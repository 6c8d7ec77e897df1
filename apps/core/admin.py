# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import Board, Card, Coluna, Usuario


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Admin customizado para o modelo Usuario"""

    list_display = ['username', 'email', 'get_full_name', 'is_active', 'date_joined']
    search_fields = ['username', 'first_name', 'last_name', 'email']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Informações Adicionais', {
            'fields': ('telefone',)
        }),
    )


class ColunaInline(admin.TabularInline):
    model = Coluna
    extra = 0
    fields = ['titulo', 'ordem', 'limite_wip', 'cor']
    ordering = ['ordem']


class CardInline(admin.TabularInline):
    model = Card
    extra = 0
    fields = ['titulo', 'responsavel', 'prazo', 'ordem']
    ordering = ['ordem']


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    """Admin para boards Kanban"""

    list_display = ['titulo', 'criado_por', 'colunas_count', 'criado_em']
    search_fields = ['titulo', 'descricao']
    readonly_fields = ['criado_em', 'atualizado_em']
    inlines = [ColunaInline]

    def colunas_count(self, obj):
        return obj.colunas.count()

    colunas_count.short_description = 'Colunas'


@admin.register(Coluna)
class ColunaAdmin(admin.ModelAdmin):
    """Admin para colunas do Kanban"""

    list_display = ['titulo', 'board', 'ordem', 'limite_wip', 'cards_wip', 'cor_preview']
    list_filter = ['board']
    search_fields = ['titulo', 'board__titulo']
    ordering = ['board', 'ordem']
    inlines = [CardInline]

    def cards_wip(self, obj):
        """Total de cards, em vermelho quando passa do limite"""
        total = obj.cards.count()
        if obj.limite_wip is None:
            return total

        estado = obj.estado_wip(total=total)
        if estado.acima_limite:
            return format_html(
                '<span style="color: red; font-weight: bold;">{}/{}</span>',
                total, obj.limite_wip
            )
        return f"{total}/{obj.limite_wip}"

    cards_wip.short_description = 'Cards/WIP'

    def cor_preview(self, obj):
        return format_html(
            '<div style="width: 20px; height: 20px; background-color: {}; '
            'border: 1px solid #ccc; border-radius: 3px;"></div>',
            obj.cor
        )

    cor_preview.short_description = 'Cor'


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    """Admin para cards"""

    list_display = ['id', 'titulo', 'coluna', 'ordem', 'responsavel', 'prazo']
    list_filter = ['coluna__board', 'coluna']
    search_fields = ['titulo', 'descricao']
    ordering = ['coluna', 'ordem']
    readonly_fields = ['criado_em', 'atualizado_em']


admin.site.site_header = 'Raia - Administração'
admin.site.site_title = 'Raia Admin'
admin.site.index_title = 'Painel Administrativo'
