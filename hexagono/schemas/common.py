# hexagono/schemas/common.py
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from hexagono.models.quote import as_utc


class CamelModel(BaseModel):
    """JSON en camelCase hacia afuera, snake_case adentro."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# SQLite devuelve datetimes naive
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
