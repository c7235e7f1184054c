"""
Errores del motor de disponibilidad.

Todos son errores de validación locales: se devuelven al llamador de forma
síncrona y `app.main` los traduce a respuestas HTTP.
"""
from typing import Optional
from datetime import date


class SchedulingError(Exception):
    """Base de todos los errores del motor"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTimeFormat(SchedulingError, ValueError):
    def __init__(self, value):
        super().__init__(f"Hora inválida: {value!r} (formato esperado HH:MM)")
        self.value = value


class InvalidSlot(SchedulingError, ValueError):
    pass


class UnknownCategory(SchedulingError):
    status_code = 404

    def __init__(self, slug: str):
        super().__init__(f"Categoría desconocida: {slug}")
        self.slug = slug


class BookingConflict(SchedulingError):
    status_code = 409

    def __init__(self, result):
        super().__init__(result.conflict_message or "El horario ya no está disponible")
        self.result = result


class AnnouncerUnavailable(SchedulingError):
    status_code = 409

    def __init__(self, day: date, reason: Optional[str] = None):
        super().__init__(f"El cuidador no está disponible el {day.isoformat()}")
        self.day = day
        self.reason = reason
