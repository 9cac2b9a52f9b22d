"""
Interfaz de línea de comandos del importador.
"""
