from enum import Enum


class Category(str, Enum):
    ELECTRONICS = "ELECTRONICS"
    VEHICLES = "VEHICLES"
    REAL_ESTATE = "REAL_ESTATE"
    HOME_AND_GARDEN = "HOME_AND_GARDEN"
    FASHION = "FASHION"
    JOBS = "JOBS"
    SERVICES = "SERVICES"
    OTHER = "OTHER"
