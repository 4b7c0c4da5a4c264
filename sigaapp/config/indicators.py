# sigaapp/config/indicators.py

INDICATOR_DEFINITIONS = {
    # ========== MONEDA ==========
    'dolar': {
        'name': 'Dólar observado',
        'path': '/dolar',
        'fallback': False
    },

    # ========== UNIDADES REAJUSTABLES ==========
    'uf': {
        'name': 'Unidad de Fomento',
        'path': '/uf',
        'fallback': False
    },

    # ========== TRIBUTARIAS ==========
    # mindicador.cl a veces devuelve la serie vacía a inicio de mes
    'utm': {
        'name': 'Unidad Tributaria Mensual',
        'path': '/utm',
        'fallback': True,
        'fallback_unit': 'Pesos'
    },
}
