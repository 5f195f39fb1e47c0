from app.models.user import User
from app.models.login_attempt import LoginAttempt
from app.models.audit_log import AuditLog
from app.models.menu_item import MenuItem
from app.models.staff import Staff
from app.models.review import Review
from app.models.email_message_log import EmailMessageLog
from app.models.reservation import Reservation
from app.models.subscription import Subscription
