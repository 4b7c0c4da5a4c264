"""
SIGA - Cliente de inventario y ventas para la plataforma SaaS SIGA
"""
__version__ = "1.0.0"
