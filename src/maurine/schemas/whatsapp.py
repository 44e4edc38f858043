from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

GROUP_SUFFIX = "@g.us"


class QrIssued(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    qr: str


class SessionReady(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    wid: Optional[str] = None


class MessageReceived(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    sender: str = Field(alias="from")
    body: str = ""
    has_quoted_msg: bool = False

    @field_validator("body", mode="before")
    @classmethod
    def empty_body(cls, value):
        # Media and system messages arrive with a null body
        return "" if value is None else value

    @property
    def is_group(self) -> bool:
        return self.sender.endswith(GROUP_SUFFIX)


class QuotedMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    body: str = ""
