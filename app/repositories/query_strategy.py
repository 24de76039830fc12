"""
Estrategias de lectura para listas filtradas y ordenadas.

El almacén exige un índice compuesto declarado para combinar filtros de
igualdad con un orden sobre otro campo. Cada lista intenta primero la
estrategia ``indexed`` (filtro + orden + límite en la base de datos) y, si la
combinación no tiene índice, la estrategia ``scan_sort`` trae los registros
filtrados sin ordenar y los ordena en memoria antes de aplicar el límite.

Ambas estrategias producen exactamente el mismo orden: nulos al final y
desempate por clave primaria en la misma dirección que el campo de orden.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Type

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from app.core.errors import MissingIndexError, classify_backend_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SortSpec:
    field: str
    descending: bool = True


@dataclass
class ListQuery:
    """Consulta de lista: filtros de igualdad, orden opcional y límite."""
    filters: Dict[str, Any] = field(default_factory=dict)
    sort: Optional[SortSpec] = None
    limit: Optional[int] = None


def primary_key_column(model: Type[Any]):
    return inspect(model).primary_key[0]


def apply_filters(query: Query, model: Type[Any], filters: Dict[str, Any]) -> Query:
    """Aplica filtros de igualdad; una lista/tupla/set se traduce a ``IN``."""
    for name, value in filters.items():
        column = getattr(model, name)
        if isinstance(value, (list, tuple, set, frozenset)):
            query = query.filter(column.in_(list(value)))
        elif value is None:
            query = query.filter(column.is_(None))
        else:
            query = query.filter(column == value)
    return query


def sort_records(records: Sequence[Any], model: Type[Any], sort: SortSpec) -> List[Any]:
    """
    Ordena en memoria con la misma semántica que ``ORDER BY campo, pk NULLS LAST``.

    Args:
        records: Registros ya filtrados
        model: Modelo al que pertenecen (para conocer la clave primaria)
        sort: Campo y dirección

    Returns:
        List[Any]: Nueva lista ordenada
    """
    pk_name = primary_key_column(model).key
    present = [r for r in records if getattr(r, sort.field) is not None]
    missing = [r for r in records if getattr(r, sort.field) is None]
    present.sort(key=lambda r: (getattr(r, sort.field), getattr(r, pk_name)), reverse=sort.descending)
    missing.sort(key=lambda r: getattr(r, pk_name), reverse=sort.descending)
    return present + missing


class IndexRegistry:
    """
    Índices compuestos conocidos, declarados como ``coleccion:campo[,campo]:orden``.
    """

    def __init__(self, declarations: Iterable[str] = ()):
        self._indexes: set = set()
        for declaration in declarations:
            self.declare(declaration)

    def declare(self, declaration: str) -> None:
        parts = [p.strip() for p in declaration.split(":")]
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Declaración de índice inválida: {declaration!r}")
        collection, eq_fields, sort_field = parts
        fields = frozenset(f.strip() for f in eq_fields.split(",") if f.strip())
        self._indexes.add((collection, fields, sort_field))

    def supports(self, collection: str, filter_fields: Iterable[str], sort_field: Optional[str]) -> bool:
        fields: FrozenSet[str] = frozenset(filter_fields)
        # Orden sin filtros, o filtro sobre el mismo campo, no necesita índice compuesto
        if sort_field is None or not fields or fields <= {sort_field}:
            return True
        return (collection, fields, sort_field) in self._indexes

    def __len__(self) -> int:
        return len(self._indexes)


class IndexedQueryStrategy:
    """Filtro + orden + límite resueltos por la base de datos."""

    name = "indexed"

    def __init__(self, registry: IndexRegistry):
        self.registry = registry

    def fetch(self, db: Session, model: Type[Any], list_query: ListQuery) -> List[Any]:
        collection = model.__tablename__
        sort = list_query.sort
        if sort is not None and not self.registry.supports(collection, list_query.filters.keys(), sort.field):
            raise MissingIndexError(collection, list_query.filters.keys(), sort.field)

        query = apply_filters(db.query(model), model, list_query.filters)
        if sort is not None:
            column = getattr(model, sort.field)
            pk = primary_key_column(model)
            if sort.descending:
                query = query.order_by(column.desc().nulls_last(), pk.desc())
            else:
                query = query.order_by(column.asc().nulls_last(), pk.asc())
        if list_query.limit is not None:
            query = query.limit(list_query.limit)

        try:
            return query.all()
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e


class ScanSortStrategy:
    """Solo filtros en la base de datos; orden y límite en memoria."""

    name = "scan_sort"

    def fetch(self, db: Session, model: Type[Any], list_query: ListQuery) -> List[Any]:
        query = apply_filters(db.query(model), model, list_query.filters)
        try:
            records = query.all()
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e

        if list_query.sort is not None:
            records = sort_records(records, model, list_query.sort)
        if list_query.limit is not None:
            records = records[:list_query.limit]
        return records


class FallbackQueryRunner:
    """
    Ejecuta la estrategia primaria y recurre a la secundaria ante ``MissingIndexError``.

    Cualquier otro error (permisos, red, etc.) se propaga sin reintentos.
    """

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback

    def run(self, db: Session, model: Type[Any], list_query: ListQuery) -> List[Any]:
        try:
            return self.primary.fetch(db, model, list_query)
        except MissingIndexError as e:
            logger.warning(
                f"Consulta ordenada no soportada en '{model.__tablename__}' ({e.message}); "
                f"usando estrategia {self.fallback.name}"
            )
        return self.fallback.fetch(db, model, list_query)


def build_query_runner(declared_indexes: Iterable[str]) -> FallbackQueryRunner:
    registry = IndexRegistry(declared_indexes)
    logger.debug(f"Registro de índices compuestos con {len(registry)} declaraciones")
    return FallbackQueryRunner(IndexedQueryStrategy(registry), ScanSortStrategy())

