"""
ChillGamer schemas for result envelopes and response bodies

The ``Envelope`` is the uniform result of the CRUD dispatcher. Its
``outcome`` is internal and never rendered, while the remaining fields
are forwarded to clients where adequate. The other models describe the
bodies of successful responses of the route layer.
"""

import enum
from typing import Any, Dict, List, Optional, Union

import pydantic


Document = Dict[str, Any]


@enum.unique
class Outcome(enum.Enum):
    SUCCESS = "success"
    CREATED = "created"
    NOT_FOUND = "not found"
    UNCHANGED = "unchanged"
    INVALID_IDENTIFIER = "invalid identifier"
    INVALID_OPERATION = "invalid operation"
    STORE_ERROR = "store error"


class Envelope(pydantic.BaseModel):
    success: bool
    message: str
    data: Optional[Union[Document, List[Document]]] = None
    insertedId: Optional[str] = None
    modifiedCount: Optional[pydantic.NonNegativeInt] = None
    error: Optional[str] = None
    outcome: Outcome = pydantic.Field(default=Outcome.SUCCESS, exclude=True)

    @property
    def failed(self) -> bool:
        return not self.success


class Insertion(pydantic.BaseModel):
    success: bool = True
    insertedId: str


class Confirmation(pydantic.BaseModel):
    success: bool = True
    message: str


class Page(pydantic.BaseModel):
    data: List[Document]
    currentPage: pydantic.PositiveInt
    totalPage: pydantic.NonNegativeInt
