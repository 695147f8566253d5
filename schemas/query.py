from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, model_validator

from core.errors import QueryValidationError

# field name -> nested selection, or None for a scalar leaf
Selection = Dict[str, Optional["Selection"]]

RootName = Literal["shop", "shops", "product", "order", "line_item"]


class QueryRequest(BaseModel):
    root: RootName
    id: Optional[int] = None
    fields: List[Union[str, Dict[str, Any]]]

    @model_validator(mode="after")
    def check_id(self):
        if self.root == "shops":
            if self.id is not None:
                raise ValueError("'shops' does not take an id")
        elif self.id is None:
            raise ValueError(f"'{self.root}' requires an id")
        return self


class FieldError(BaseModel):
    path: List[Union[str, int]]
    code: str
    message: str


class QueryResponse(BaseModel):
    data: Dict[str, Any]
    errors: List[FieldError] = []


def parse_selection(fields: List[Any]) -> Selection:
    """Turn ``["id", {"products": ["name"]}]`` into a selection tree."""
    if not isinstance(fields, list) or not fields:
        raise QueryValidationError("A selection must be a non-empty list of fields")

    selection: Selection = {}
    for item in fields:
        if isinstance(item, str):
            _add(selection, item, None)
        elif isinstance(item, dict):
            for name, nested in item.items():
                _add(selection, name, parse_selection(nested))
        else:
            raise QueryValidationError(f"Invalid selection entry: {item!r}")
    return selection


def _add(selection: Selection, name: str, nested: Optional[Selection]) -> None:
    if name in selection:
        raise QueryValidationError(f"Field '{name}' selected more than once", field=name)
    selection[name] = nested
