# Esquemas pydantic de la consola de administración
