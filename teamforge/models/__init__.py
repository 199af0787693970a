"""
TeamForge – SQLAlchemy ORM models package.

Imports all model classes so the app can discover them
through a single ``from teamforge.models import *`` import.
"""

from teamforge.models.user import User                                  # noqa: F401
from teamforge.models.team import Team                                  # noqa: F401
from teamforge.models.team_membership import TeamMembership            # noqa: F401
from teamforge.models.challenge import Challenge                        # noqa: F401
from teamforge.models.challenge_attempt import ChallengeAttempt        # noqa: F401
from teamforge.models.game_room import GameRoom                         # noqa: F401
