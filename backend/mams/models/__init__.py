from .auth import User, SessionToken
from .assets import Asset
from .movements import Transfer, Purchase, Assignment, Expenditure
from .activity import ActivityLog

__all__ = [
    'User', 'SessionToken',
    'Asset',
    'Transfer', 'Purchase', 'Assignment', 'Expenditure',
    'ActivityLog',
]
