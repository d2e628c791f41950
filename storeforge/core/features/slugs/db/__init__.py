# (c) Copyright Datacraft, 2026
from .orm import SlugReservation, ReservationStatus
from .api import (
	get_reservation,
	claimed_slugs,
	claim,
	activate,
	release_for_tenant,
	release_expired,
)

__all__ = [
	"SlugReservation",
	"ReservationStatus",
	"get_reservation",
	"claimed_slugs",
	"claim",
	"activate",
	"release_for_tenant",
	"release_expired",
]
