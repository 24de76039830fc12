# Importar todos los modelos para que create_all los registre
from app.db.base_class import Base  # noqa
from app.models.gym import Gym  # noqa
from app.models.user import UserProfile  # noqa
from app.models.enrollment import Enrollment  # noqa
from app.models.plan_change import PlanChangeRequest  # noqa
from app.models.gym_report import GymReport  # noqa
from app.models.gym_review import GymReview  # noqa
from app.models.check_in import ActiveCheckIn, CheckInHistory  # noqa
