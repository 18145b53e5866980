from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Базовая схема API: поля в JSON в camelCase, в Python в snake_case"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
