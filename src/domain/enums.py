"""Domain enumerations."""

import enum


class ServiceType(str, enum.Enum):
    MOTO_TAXI = "moto_taxi"
    PASSENGER_CAR = "passenger_car"
    DELIVERY_BIKE = "delivery_bike"
    DELIVERY_CAR = "delivery_car"

    @property
    def label(self) -> str:
        return SERVICE_LABELS[self]


SERVICE_LABELS: dict[ServiceType, str] = {
    ServiceType.MOTO_TAXI: "Moto Táxi",
    ServiceType.PASSENGER_CAR: "Carro Passageiro",
    ServiceType.DELIVERY_BIKE: "Moto Flash",
    ServiceType.DELIVERY_CAR: "Car Flash",
}


class UnavailableReason(str, enum.Enum):
    REGION_UNAVAILABLE = "UNAVAILABLE_REGION"
    OUT_OF_SCHEDULE = "OUT_OF_SCHEDULE"
    SERVICE_DISABLED = "SERVICE_DISABLED"


class ServiceFeeType(str, enum.Enum):
    FIXED = "fixed"
    PERCENT = "percent"
