"""
Máquina de estados de las solicitudes de inscripción.

Transiciones:
    pending  -> approved | rejected
    approved -> pending   (reversión manual del admin)

Cada transición modifica dos registros (la solicitud ``Enrollment`` y el
perfil ``UserProfile``) dentro de una única transacción: o se aplican ambos
o ninguno. La solicitud se actualiza con compare-and-set sobre su estado, de
modo que dos admins actuando a la vez no se pisan: el segundo ve la
operación como idempotente (mismo destino) o recibe un conflicto.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.admin_session import AdminSession
from app.core.date_utils import utc_now
from app.core.errors import InvalidTransitionError, NotFoundError, PermissionDeniedError
from app.db.session import transaction
from app.models.enrollment import Enrollment
from app.models.user import EnrollmentStatus, UserProfile, UserRole
from app.repositories.enrollment import enrollment_repository
from app.repositories.user import user_repository
from app.schemas.enrollment import (
    Enrollment as EnrollmentSchema,
    EnrollmentCounts,
    EnrollmentListResponse,
    EnrollmentTransitionResult,
)
from app.schemas.user import UserProfile as UserProfileSchema

logger = logging.getLogger(__name__)


class EnrollmentService:
    """
    Servicio para aprobar, rechazar y revertir inscripciones.
    """

    # --- Lecturas ---

    def list_enrollments(
        self,
        db: Session,
        session: AdminSession,
        *,
        status: Optional[EnrollmentStatus] = None,
        limit: Optional[int] = None,
    ) -> List[Enrollment]:
        gym_id = session.require_gym_id()
        return enrollment_repository.list_for_gym(db, gym_id=gym_id, status=status, limit=limit)

    def list_with_counts(
        self,
        db: Session,
        session: AdminSession,
        *,
        status: Optional[EnrollmentStatus] = None,
        limit: Optional[int] = None,
    ) -> EnrollmentListResponse:
        """Lista (opcionalmente filtrada) y contadores sobre todas las solicitudes del gimnasio."""
        all_enrollments = self.list_enrollments(db, session)
        if status is None and limit is None:
            listed = all_enrollments
        else:
            listed = self.list_enrollments(db, session, status=status, limit=limit)
        return EnrollmentListResponse(
            enrollments=[EnrollmentSchema.model_validate(e) for e in listed],
            counts=self.counts(all_enrollments),
        )

    def counts(self, enrollments: List[Enrollment]) -> EnrollmentCounts:
        by_status = {s: 0 for s in EnrollmentStatus}
        for e in enrollments:
            by_status[EnrollmentStatus(e.status)] += 1
        revenue = sum(e.amount or 0.0 for e in enrollments if e.status == EnrollmentStatus.APPROVED)
        return EnrollmentCounts(
            total=len(enrollments),
            pending=by_status[EnrollmentStatus.PENDING],
            approved=by_status[EnrollmentStatus.APPROVED],
            rejected=by_status[EnrollmentStatus.REJECTED],
            approved_revenue=float(revenue),
        )

    # --- Transiciones iniciadas desde la solicitud ---

    def approve(self, db: Session, session: AdminSession, enrollment_id: str) -> EnrollmentTransitionResult:
        """
        Aprueba una solicitud pendiente y activa la membresía del perfil.

        Efectos (atómicos): solicitud -> approved con verified_at/verified_by;
        perfil -> approved, enrolled_at=ahora, gym_id resuelto. Reaprobar una
        solicitud ya aprobada no cambia nada (enrolled_at se conserva).

        Args:
            db: Sesión de base de datos
            session: Sesión del operador
            enrollment_id: ID de la solicitud

        Returns:
            EnrollmentTransitionResult: Solicitud y perfil resultantes

        Raises:
            NotFoundError: Si la solicitud o el perfil no existen
            PermissionDeniedError: Si la solicitud es de otro gimnasio
            InvalidTransitionError: Si la solicitud no está pendiente
        """
        enrollment = enrollment_repository.get_or_404(db, enrollment_id)
        session.ensure_gym_access(enrollment.gym_id)
        gym_id = session.gym_id or enrollment.gym_id

        with transaction(db):
            changed = self._transition_enrollment(db, session, enrollment, EnrollmentStatus.APPROVED)
            profile = self._get_profile(db, enrollment.user_id)
            if changed:
                profile.enrollment_status = EnrollmentStatus.APPROVED
                profile.enrolled_at = utc_now()
                profile.gym_id = gym_id
                db.add(profile)

        logger.info(
            f"Inscripción {enrollment_id} aprobada por {session.uid} "
            f"(usuario {enrollment.user_id}, gimnasio {gym_id}, cambio={changed})"
        )
        return self._result(db, enrollment, profile, changed)

    def reject(self, db: Session, session: AdminSession, enrollment_id: str) -> EnrollmentTransitionResult:
        """
        Rechaza una solicitud pendiente y desvincula al miembro del gimnasio.

        Efectos (atómicos): solicitud -> rejected con auditoría; perfil ->
        rejected y gym_id=None.
        """
        enrollment = enrollment_repository.get_or_404(db, enrollment_id)
        session.ensure_gym_access(enrollment.gym_id)

        with transaction(db):
            changed = self._transition_enrollment(db, session, enrollment, EnrollmentStatus.REJECTED)
            profile = self._get_profile(db, enrollment.user_id)
            if changed:
                profile.enrollment_status = EnrollmentStatus.REJECTED
                profile.gym_id = None
                db.add(profile)

        logger.info(f"Inscripción {enrollment_id} rechazada por {session.uid} (usuario {enrollment.user_id}, cambio={changed})")
        return self._result(db, enrollment, profile, changed)

    # --- Transiciones iniciadas desde el perfil del miembro ---

    def approve_member(self, db: Session, session: AdminSession, uid: str) -> EnrollmentTransitionResult:
        """
        Aprueba la membresía de un miembro pendiente de este gimnasio.

        Si existe una solicitud pendiente para el miembro se aprueba en la
        misma transacción (la más reciente si hay varias).
        """
        gym_id = session.require_gym_id()
        profile = self._get_member_of_gym(db, session, uid)
        current = EnrollmentStatus(profile.enrollment_status)
        if current == EnrollmentStatus.APPROVED:
            return self._result(db, None, profile, changed=False)
        if current != EnrollmentStatus.PENDING:
            raise InvalidTransitionError(f"No se puede aprobar un miembro en estado '{current.value}'")

        with transaction(db):
            enrollment = enrollment_repository.find_matching(
                db, user_id=uid, gym_id=gym_id, status=EnrollmentStatus.PENDING
            )
            if enrollment is not None:
                self._transition_enrollment(db, session, enrollment, EnrollmentStatus.APPROVED)
            profile.enrollment_status = EnrollmentStatus.APPROVED
            profile.enrolled_at = utc_now()
            profile.gym_id = gym_id
            db.add(profile)

        logger.info(f"Miembro {uid} aprobado por {session.uid} en gimnasio {gym_id}")
        return self._result(db, enrollment, profile, changed=True)

    def reject_member(self, db: Session, session: AdminSession, uid: str) -> EnrollmentTransitionResult:
        gym_id = session.require_gym_id()
        profile = self._get_member_of_gym(db, session, uid)
        current = EnrollmentStatus(profile.enrollment_status)
        if current != EnrollmentStatus.PENDING:
            raise InvalidTransitionError(f"No se puede rechazar un miembro en estado '{current.value}'")

        with transaction(db):
            enrollment = enrollment_repository.find_matching(
                db, user_id=uid, gym_id=gym_id, status=EnrollmentStatus.PENDING
            )
            if enrollment is not None:
                self._transition_enrollment(db, session, enrollment, EnrollmentStatus.REJECTED)
            profile.enrollment_status = EnrollmentStatus.REJECTED
            profile.gym_id = None
            db.add(profile)

        logger.info(f"Miembro {uid} rechazado por {session.uid} en gimnasio {gym_id}")
        return self._result(db, enrollment, profile, changed=True)

    def set_member_pending(self, db: Session, session: AdminSession, uid: str) -> EnrollmentTransitionResult:
        """
        Revierte una membresía aprobada a pendiente.

        Perfil -> pending con enrolled_at=None; la solicitud correspondiente
        (la aprobada más reciente del usuario en el gimnasio)
        vuelve a pending y pierde los campos de auditoría. Una aprobación
        posterior es una aprobación nueva y reinicia enrolled_at.
        """
        gym_id = session.require_gym_id()
        profile = self._get_member_of_gym(db, session, uid)
        current = EnrollmentStatus(profile.enrollment_status)
        if current == EnrollmentStatus.PENDING:
            return self._result(db, None, profile, changed=False)
        if current != EnrollmentStatus.APPROVED:
            raise InvalidTransitionError(f"Solo un miembro aprobado puede volver a pendiente (estado '{current.value}')")

        with transaction(db):
            enrollment = enrollment_repository.find_matching(
                db, user_id=uid, gym_id=gym_id, status=EnrollmentStatus.APPROVED
            )
            if enrollment is not None:
                enrollment_repository.update(
                    db,
                    db_obj=enrollment,
                    obj_in={"status": EnrollmentStatus.PENDING, "verified_at": None, "verified_by": None},
                    commit=False,
                )
            profile.enrollment_status = EnrollmentStatus.PENDING
            profile.enrolled_at = None
            db.add(profile)

        logger.info(f"Miembro {uid} devuelto a pendiente por {session.uid} en gimnasio {gym_id}")
        return self._result(db, enrollment, profile, changed=True)

    # --- Auxiliares ---

    def _transition_enrollment(
        self,
        db: Session,
        session: AdminSession,
        enrollment: Enrollment,
        target: EnrollmentStatus,
    ) -> bool:
        """
        Compare-and-set pending -> target sobre la solicitud.

        Returns:
            bool: True si se aplicó el cambio, False si ya estaba en ``target``

        Raises:
            InvalidTransitionError: Si el estado actual no es pending ni target
        """
        updated = enrollment_repository.compare_and_set(
            db,
            enrollment_id=enrollment.id,
            expected=[EnrollmentStatus.PENDING],
            values={"status": target, "verified_at": utc_now(), "verified_by": session.uid},
        )
        if updated:
            return True

        db.refresh(enrollment)
        current = EnrollmentStatus(enrollment.status)
        if current == target:
            logger.info(f"Inscripción {enrollment.id} ya estaba en '{target.value}'; sin cambios")
            return False
        raise InvalidTransitionError(
            f"La inscripción está en estado '{current.value}' y no puede pasar a '{target.value}'"
        )

    def _get_profile(self, db: Session, uid: str) -> UserProfile:
        profile = user_repository.get(db, uid)
        if profile is None:
            raise NotFoundError(f"Perfil de usuario {uid} no encontrado")
        return profile

    def _get_member_of_gym(self, db: Session, session: AdminSession, uid: str) -> UserProfile:
        profile = self._get_profile(db, uid)
        if profile.role != UserRole.MEMBER:
            raise PermissionDeniedError("Solo se pueden gestionar perfiles de miembros")
        session.ensure_gym_access(profile.gym_id)
        return profile

    def _result(
        self,
        db: Session,
        enrollment: Optional[Enrollment],
        profile: UserProfile,
        changed: bool,
    ) -> EnrollmentTransitionResult:
        if enrollment is not None:
            db.refresh(enrollment)
        db.refresh(profile)
        return EnrollmentTransitionResult(
            enrollment=EnrollmentSchema.model_validate(enrollment) if enrollment is not None else None,
            profile=UserProfileSchema.model_validate(profile),
            changed=changed,
        )


enrollment_service = EnrollmentService()
