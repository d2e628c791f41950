# (c) Copyright Datacraft, 2026
from .orm import OnboardingSession, SessionStatus
from .api import get_session, set_session_status

__all__ = [
	"OnboardingSession",
	"SessionStatus",
	"get_session",
	"set_session_status",
]
