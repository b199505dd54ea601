from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body whose JSON keys are camelCase, matching stored documents."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_document(self, exclude_unset: bool = False) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=exclude_unset)
