#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Raia - ordenação de colunas e cards
"""

import os
import subprocess
import sys
from datetime import datetime


def _manage(*args):
    return subprocess.call([sys.executable, 'manage.py', *args])


def main():
    """Run administrative tasks."""

    # Configuração padrão para desenvolvimento
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Atalhos do Raia
    if len(sys.argv) > 1:
        command = sys.argv[1]

        if command == 'setup':
            print("🚀 Configurando Raia...")

            print("📊 Aplicando migrações...")
            if _manage('migrate') != 0:
                print("❌ Erro nas migrações")
                sys.exit(1)

            print("🌱 Populando banco com dados demo...")
            _manage('seed')
            print("✅ Setup concluído!")
            return

        elif command == 'backup':
            print("💾 Criando backup do banco...")
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            backup_file = f"backup_raia_{timestamp}.json"
            _manage('dumpdata', '--indent', '2', '--output', backup_file, 'core')
            print(f"✅ Backup criado: {backup_file}")
            return

        elif command == 'reset':
            confirm = input("⚠️  Isso irá apagar TODOS os dados. Continuar? (y/N): ")
            if confirm.lower() == 'y':
                print("🗑️  Resetando banco de dados...")
                _manage('flush', '--noinput')
                _manage('migrate')
                _manage('seed')
                print("✅ Reset concluído!")
            return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
