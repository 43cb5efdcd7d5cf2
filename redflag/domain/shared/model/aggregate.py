from pydantic import BaseModel, ConfigDict


class Aggregate(BaseModel):
    """Base for aggregate roots and entities. Assignments are re-validated."""

    model_config = ConfigDict(validate_assignment=True)
