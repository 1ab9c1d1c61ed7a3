"""Interface UUIDGenerator - Puerto para generación de identificadores únicos."""

import uuid
from abc import ABC, abstractmethod


class UUIDGenerator(ABC):
    """
    Puerto para generación de identificadores de reservas.

    Permite inyectar implementaciones fake para testing determinista.
    """

    @abstractmethod
    def generate_uuid(self) -> str:
        """
        Genera un UUID v4 único.

        Returns:
            String con UUID en formato estándar.
        """
        raise NotImplementedError


class RealUUIDGenerator(UUIDGenerator):
    def generate_uuid(self) -> str:
        return str(uuid.uuid4())


class FakeUUIDGenerator(UUIDGenerator):
    """Genera UUIDs predecibles basados en un contador."""

    def __init__(self) -> None:
        self._counter = 0

    def generate_uuid(self) -> str:
        self._counter += 1
        hex_value = f"{self._counter:032x}"
        return str(uuid.UUID(hex_value))

    def reset(self) -> None:
        self._counter = 0
