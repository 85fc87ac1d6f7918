# Nombre de archivo: __init__.py
# Ubicación de archivo: core/importer/__init__.py
# Descripción: Paquete del motor de importación/exportación de planillas

"""Motor de reconciliación de planillas: resolución, asignación de IDs, estrategias y reporte."""
