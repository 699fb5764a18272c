"""
Capa de Aplicación - Núcleo de reservas de viaje.

Esta capa contiene los casos de uso y las interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Casos de uso (carrito, códigos, órdenes, pagos, búsqueda)
- interfaces/: Puertos (contratos para adaptadores)
"""
