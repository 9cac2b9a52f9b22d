"""
Importador de registros tabulares (Excel, MongoDB) a bases de datos de Notion.
"""

__version__ = "1.0.0"
