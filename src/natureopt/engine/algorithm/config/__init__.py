"""Algorithm configuration module.

This package provides frozen configuration dataclasses and fluent builders for
every built-in strategy.

Examples:
    from natureopt.engine.algorithm.config import DEConfig, PSOConfig

    # Fluent builder
    cfg = DEConfig().pop_size(50).strategy("best1").f(0.5).fixed()

    # Quick defaults
    cfg = PSOConfig.default(pop_size=40)
"""

from .de import DEConfig, DEConfigData
from .fa import FAConfig, FAConfigData
from .pso import PSOConfig, PSOConfigData
from .rga import RGAConfig, RGAConfigData
from .tlbo import TLBOConfig, TLBOConfigData

AlgorithmConfigData = RGAConfigData | DEConfigData | PSOConfigData | FAConfigData | TLBOConfigData

__all__ = [
    "AlgorithmConfigData",
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
]
