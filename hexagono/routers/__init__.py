# Routers HTTP de la API de cotizaciones
