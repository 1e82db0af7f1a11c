# Servicios de dominio: precios, ciclo de vida, notificaciones
