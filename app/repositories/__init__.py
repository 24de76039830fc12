# Inicializador del paquete repositories
from app.repositories.base import BaseRepository
from app.repositories.gym import gym_repository
from app.repositories.user import user_repository
from app.repositories.enrollment import enrollment_repository
from app.repositories.plan_change import plan_change_repository
from app.repositories.gym_report import gym_report_repository
from app.repositories.gym_review import gym_review_repository
from app.repositories.check_in import active_check_in_repository, check_in_history_repository
