# wasfa/models/registry.py
# Importing this module registers every table on Base.metadata
# (used by Alembic autogenerate and by the test suite's create_all).
from wasfa.models.audit_log import AuditLog
from wasfa.models.favorite_medication import FavoriteMedication
from wasfa.models.patient import Patient
from wasfa.models.prescription import Prescription, PrescriptionMedication
from wasfa.models.profile import Profile
from wasfa.models.template import PrescriptionTemplate, TemplateMedication
from wasfa.models.tenant import Tenant
from wasfa.models.user import User
from wasfa.models.user_role import UserRole
from wasfa.utils.token_utils import PasswordResetToken
