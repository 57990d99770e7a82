"""Search strategies and their settings."""

from .base import Algorithm, accept
from .config import (
    DEConfig,
    DEConfigData,
    FAConfig,
    FAConfigData,
    PSOConfig,
    PSOConfigData,
    RGAConfig,
    RGAConfigData,
    TLBOConfig,
    TLBOConfigData,
)
from .de import DE
from .fa import FA
from .pso import PSO
from .registry import available_algorithms, build_algorithm, resolve_algorithm
from .rga import RGA
from .tlbo import TLBO

__all__ = [
    "Algorithm",
    "accept",
    "DE",
    "FA",
    "PSO",
    "RGA",
    "TLBO",
    "DEConfig",
    "DEConfigData",
    "FAConfig",
    "FAConfigData",
    "PSOConfig",
    "PSOConfigData",
    "RGAConfig",
    "RGAConfigData",
    "TLBOConfig",
    "TLBOConfigData",
    "available_algorithms",
    "build_algorithm",
    "resolve_algorithm",
]
