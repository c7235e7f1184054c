# app/scheduling/constants.py
import re

# Valores por defecto cuando el cuidador no tiene perfil de capacidad
DEFAULT_BUFFER_MINUTES = 0
DEFAULT_MAX_ANIMALS_PER_SLOT = 1

# Jornada completa usada cuando un horario no trae horas
DAY_START = "00:00"
DAY_END = "23:59"
MINUTES_PER_DAY = 24 * 60

TIME_FORMAT = re.compile(r"^(\d{2}):(\d{2})$")

# Estados que no participan en la detección de conflictos
INACTIVE_STATUSES = frozenset({"cancelled", "refused"})
