# services/resolver.py
import logging
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from pydantic import BaseModel

from core.context import Context
from core.errors import QueryValidationError, ReferentialIntegrityError, ShopGraphError, StorageError
from schemas.query import FieldError, QueryResponse, Selection

logger = logging.getLogger(__name__)

Path = List[Union[str, int]]


class Field(NamedTuple):
    # Entity type the field resolves to, or None for a scalar
    target: Optional[str]
    resolve: Callable[["QueryResolver", Any], Any]


def _attr(name: str) -> Field:
    return Field(None, lambda r, e: getattr(e, name))


FIELDS: Dict[str, Dict[str, Field]] = {
    "Shop": {
        "id": _attr("id"),
        "name": _attr("name"),
        "products": Field("Product", lambda r, e: r.loader.load_products_of_shop(e.id)),
        "orders": Field("Order", lambda r, e: r.loader.load_orders_of_shop(e.id)),
    },
    "Product": {
        "id": _attr("id"),
        "shop_id": _attr("shop_id"),
        "name": _attr("name"),
        "value": Field(None, lambda r, e: float(e.value)),
        "shop": Field("Shop", lambda r, e: r.loader.load_shop_of_product(e)),
        "line_items": Field("LineItem", lambda r, e: r.loader.load_line_items_of_product(e.id)),
    },
    "Order": {
        "id": _attr("id"),
        "shop_id": _attr("shop_id"),
        "shop": Field("Shop", lambda r, e: r.loader.load_shop_of_order(e)),
        "line_items": Field("LineItem", lambda r, e: r.loader.load_line_items_of_order(e.id)),
        "total": Field(None, lambda r, e: r.aggregates.order_total(e.id)),
    },
    "LineItem": {
        "id": _attr("id"),
        "product_id": _attr("product_id"),
        "order_id": _attr("order_id"),
        "quantity": _attr("quantity"),
        "value": Field(None, lambda r, e: r.aggregates.line_item_value(e)),
        "product": Field("Product", lambda r, e: r.loader.load_product_of_line_item(e)),
        "order": Field("Order", lambda r, e: r.loader.load_order_of_line_item(e)),
    },
}

# root name -> entity type; "shops" is the collection root
ROOTS: Dict[str, str] = {
    "shop": "Shop",
    "shops": "Shop",
    "product": "Product",
    "order": "Order",
    "line_item": "LineItem",
}


def validate_selection(type_name: str, selection: Selection, path: Optional[Path] = None) -> None:
    """Reject unknown fields and wrong nesting before anything is loaded."""
    path = path or []
    fields = FIELDS[type_name]
    for name, nested in selection.items():
        where = ".".join(str(p) for p in path + [name])
        if name not in fields:
            raise QueryValidationError(f"{type_name} has no field '{name}' (at {where})", field=where)
        target = fields[name].target
        if target is None and nested is not None:
            raise QueryValidationError(f"Scalar field '{where}' takes no sub-selection", field=where)
        if target is not None and nested is None:
            raise QueryValidationError(f"Field '{where}' needs a sub-selection of {target} fields", field=where)
        if nested is not None:
            validate_selection(target, nested, path + [name])


class QueryResolver:
    """
    Walks a selection tree over the entity graph.

    Each requested relationship or aggregate costs exactly one loader or
    aggregate call scoped to the current entity. Unrequested fields are never
    fetched and nothing is memoized across siblings.

    Failures below the root null the failing field and are collected in
    ``errors``; failures loading the root itself propagate.
    """

    def __init__(self, ctx: Context):
        self.loader = ctx.loader
        self.aggregates = ctx.aggregates
        self.errors: List[FieldError] = []

    def resolve(self, root: str, id: Optional[int], selection: Selection) -> QueryResponse:
        self.errors = []
        if root not in ROOTS:
            raise QueryValidationError(f"Unknown root '{root}'", field=root)
        validate_selection(ROOTS[root], selection, [root])

        started = time.perf_counter()
        if root == "shops":
            data = self.resolve_shops(selection)
        else:
            data = getattr(self, f"resolve_{root}")(id, selection)
        logger.info(
            f"Resolved {root} with {len(self.errors)} field error(s)",
            extra={"root": root, "duration_ms": round((time.perf_counter() - started) * 1000, 2)},
        )
        return QueryResponse(data={root: data}, errors=list(self.errors))

    def resolve_shop(self, id: int, selection: Selection) -> Optional[Dict[str, Any]]:
        return self._resolve_root("Shop", self.loader.load_shop(id), selection, ["shop"])

    def resolve_shops(self, selection: Selection) -> List[Dict[str, Any]]:
        return [
            self._resolve_fields("Shop", shop, selection, ["shops", i])
            for i, shop in enumerate(self.loader.load_all_shops())
        ]

    def resolve_product(self, id: int, selection: Selection) -> Optional[Dict[str, Any]]:
        return self._resolve_root("Product", self.loader.load_product(id), selection, ["product"])

    def resolve_order(self, id: int, selection: Selection) -> Optional[Dict[str, Any]]:
        return self._resolve_root("Order", self.loader.load_order(id), selection, ["order"])

    def resolve_line_item(self, id: int, selection: Selection) -> Optional[Dict[str, Any]]:
        return self._resolve_root("LineItem", self.loader.load_line_item(id), selection, ["line_item"])

    def _resolve_root(self, type_name: str, entity: Optional[BaseModel], selection: Selection, path: Path):
        if entity is None:
            logger.debug(f"{type_name} not found", extra={"root": path[0]})
            return None
        return self._resolve_fields(type_name, entity, selection, path)

    def _resolve_fields(self, type_name: str, entity: BaseModel, selection: Selection, path: Path) -> Dict[str, Any]:
        fields = FIELDS[type_name]
        result: Dict[str, Any] = {}
        for name, nested in selection.items():
            field = fields[name]
            field_path = path + [name]
            try:
                value = field.resolve(self, entity)
            except (ReferentialIntegrityError, StorageError) as e:
                self._fail(field_path, e)
                result[name] = None
                continue

            if field.target is None:
                result[name] = value
            elif isinstance(value, list):
                result[name] = [
                    self._resolve_fields(field.target, child, nested, field_path + [i])
                    for i, child in enumerate(value)
                ]
            else:
                result[name] = self._resolve_fields(field.target, value, nested, field_path)
        return result

    def _fail(self, path: Path, exc: ShopGraphError) -> None:
        dotted = ".".join(str(p) for p in path)
        logger.warning(f"Field {dotted} failed: {exc}", extra={"path": dotted, "error_code": exc.code})
        self.errors.append(FieldError(path=path, code=exc.code, message=exc.public_message))
