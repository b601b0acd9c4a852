"""
Base común de los modelos Pydantic de la API.

Los payloads JSON usan camelCase; los modelos aceptan ambos formatos.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Modelo con alias camelCase y nombres de campo snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def changes(self) -> dict:
        """Campos enviados explícitamente en la petición (para updates parciales)."""
        return self.model_dump(exclude_unset=True)
