"""Data models for the fleet."""

from fleetsim.models.car import STATUS_CYCLE, Car, CarCreate, CarStatus, CarUpdate, StatusCount

__all__ = [
    "STATUS_CYCLE",
    "Car",
    "CarCreate",
    "CarStatus",
    "CarUpdate",
    "StatusCount",
]
