from app.models.gym import Gym
from app.models.user import UserProfile, UserRole, EnrollmentStatus, TimeSlot, PaymentMethod
from app.models.enrollment import Enrollment
from app.models.plan_change import PlanChangeRequest, PlanChangeStatus
from app.models.gym_report import GymReport, ReportStatus
from app.models.gym_review import GymReview
from app.models.check_in import ActiveCheckIn, CheckInHistory
