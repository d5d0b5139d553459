# services/__init__.py

"""
Внешние хранилища трекера привычек.
"""

from .google_sheets import GoogleSheetsBackend, sheets_backend_factory

__all__ = ['GoogleSheetsBackend', 'sheets_backend_factory']
