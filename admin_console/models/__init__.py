from admin_console.models.plan import Plan, AccountType, BillingPeriod, PlanAvailability
from admin_console.models.account import Account, PlanStatus, AccountStatus
from admin_console.models.app_user import AppUser, UserRole, UserStatus, MembershipType
from admin_console.models.view_as_session import ViewAsSession
