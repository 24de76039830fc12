from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import NotFoundError, PermissionDeniedError, classify_backend_error
from app.db.base_class import Base
from app.repositories.query_strategy import (
    FallbackQueryRunner,
    ListQuery,
    SortSpec,
    build_query_runner,
    primary_key_column,
)

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], runner: Optional[FallbackQueryRunner] = None):
        """
        Repository con operaciones CRUD por defecto, filtro de tenant y listas con fallback.

        Las escrituras aceptan ``commit=False`` para que un servicio agrupe
        varias en una sola transacción.
        """
        self.model = model
        self.pk = primary_key_column(model)
        self.runner = runner or build_query_runner(get_settings().DECLARED_INDEXES)

    def get(self, db: Session, id: Any, gym_id: Optional[str] = None) -> Optional[ModelType]:
        """
        Obtener un objeto por su ID con filtro opcional de tenant.

        Args:
            db: Sesión de base de datos
            id: ID del objeto a obtener
            gym_id: ID opcional del gimnasio (tenant) para filtrar

        Returns:
            El objeto solicitado o None si no existe
        """
        query = db.query(self.model).filter(self.pk == id)
        if gym_id is not None and hasattr(self.model, "gym_id"):
            query = query.filter(self.model.gym_id == gym_id)
        try:
            return query.first()
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e

    def get_or_404(self, db: Session, id: Any, gym_id: Optional[str] = None) -> ModelType:
        """
        Obtener un objeto o lanzar NotFoundError / PermissionDeniedError.

        Si el registro existe pero pertenece a otro gimnasio se considera un
        problema de permisos, no de existencia.
        """
        obj = self.get(db, id)
        if obj is None:
            raise NotFoundError(f"{self.model.__name__} {id} no encontrado")
        if gym_id is not None and getattr(obj, "gym_id", gym_id) != gym_id:
            raise PermissionDeniedError()
        return obj

    def list(
        self,
        db: Session,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = "created_at",
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Lista filtrada y ordenada usando la estrategia indexada con fallback a escaneo + orden.

        Args:
            db: Sesión de base de datos
            filters: Filtros de igualdad {campo: valor}; los valores None se ignoran
            order_by: Campo de orden (None = sin orden)
            descending: Dirección del orden
            limit: Número máximo de registros tras ordenar

        Returns:
            Lista de objetos que coinciden con los criterios
        """
        active_filters = {k: v for k, v in (filters or {}).items() if v is not None}
        sort = SortSpec(order_by, descending) if order_by else None
        return self.runner.run(db, self.model, ListQuery(filters=active_filters, sort=sort, limit=limit))

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], commit: bool = True) -> ModelType:
        """
        Crear un nuevo registro.

        Args:
            db: Sesión de base de datos
            obj_in: Datos del objeto a crear (schema o dict)
            commit: Confirmar la transacción inmediatamente

        Returns:
            El objeto creado
        """
        obj_in_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**obj_in_data)
        db.add(db_obj)
        self._finish(db, db_obj, commit)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
        commit: bool = True,
    ) -> ModelType:
        """
        Actualización parcial (merge de campos) de un registro.

        Args:
            db: Sesión de base de datos
            db_obj: Objeto existente a actualizar
            obj_in: Campos a modificar; en un schema solo cuentan los enviados
            commit: Confirmar la transacción inmediatamente

        Returns:
            El objeto actualizado
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)
        columns = {attr.key for attr in inspect(self.model).column_attrs}
        for field, value in update_data.items():
            if field in columns:
                setattr(db_obj, field, value)
        db.add(db_obj)
        self._finish(db, db_obj, commit)
        return db_obj

    def remove(self, db: Session, *, id: Any, gym_id: Optional[str] = None, commit: bool = True) -> ModelType:
        """
        Eliminar un registro con verificación opcional de tenant.

        Raises:
            NotFoundError: Si el objeto no existe
            PermissionDeniedError: Si pertenece a otro gimnasio
        """
        obj = self.get_or_404(db, id, gym_id=gym_id)
        db.delete(obj)
        self._finish(db, None, commit)
        return obj

    def count(self, db: Session, *, filters: Optional[Dict[str, Any]] = None) -> int:
        query = db.query(self.model)
        for field, value in (filters or {}).items():
            if value is not None:
                query = query.filter(getattr(self.model, field) == value)
        try:
            return query.count()
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e

    @staticmethod
    def _finish(db: Session, db_obj: Optional[Any], commit: bool) -> None:
        try:
            if commit:
                db.commit()
                if db_obj is not None:
                    db.refresh(db_obj)
            else:
                db.flush()
        except SQLAlchemyError as e:
            db.rollback()
            raise classify_backend_error(e) from e
