from pydantic import BaseModel, Field
from typing import List, Literal


class GeneratedAccount(BaseModel):
    username: str
    password: str
    email: str
    phone_number: str
    generation_date: str

class GeneratedAccountList(BaseModel):
    total: int
    items: List[GeneratedAccount]

class FormatRequest(BaseModel):
    text: str = Field(..., min_length=1)
    mode: Literal["lowercase", "clean", "table"] = "lowercase"

class FormatResponse(BaseModel):
    result: str
