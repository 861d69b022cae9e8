"""Base model configuration for all data structures."""

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _either_case(field_name: str) -> str | AliasChoices:
    # Discriminator fields such as ``type`` require a plain string alias.
    camel = to_camel(field_name)
    if camel == field_name:
        return field_name
    return AliasChoices(field_name, camel)


class Model(BaseModel):
    """Base model with standard configuration.

    Fields serialize with camelCase keys when dumped ``by_alias`` and accept
    either snake_case or camelCase on input.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=AliasGenerator(
            validation_alias=_either_case,
            serialization_alias=to_camel,
        ),
    )
