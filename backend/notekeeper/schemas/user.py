"""Identity schema returned by GET /me."""

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    username: str

    model_config = {"from_attributes": True}
