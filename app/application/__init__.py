"""
Capa de Aplicación - Reservas de alquiler para eventos.

Esta capa contiene los casos de uso e interfaces (puertos).
Orquesta la lógica de negocio y define los contratos con la infraestructura.

Estructura:
- use_cases/: Casos de uso del sistema
- interfaces/: Puertos (contratos para adaptadores)
"""
