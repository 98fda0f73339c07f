# buildframe/config.py
"""
Engine configuration and defaults.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Numerical tolerances and result options for one analysis run."""

    # Solver
    cond_limit: float = 1e12          # max condition estimate of Kff
    vertical_tol: float = 1e-9        # projected length below which a member is vertical

    # Serviceability
    deflection_limit_ratio: float = 250.0   # span / 250
    drift_direction: int = 0                # 0 = X, 1 = Y

    # Period estimates
    structural_system: str = 'concrete'
    compute_modal_period: bool = True

    def __post_init__(self):
        if self.cond_limit <= 1.0:
            raise ValueError(f"cond_limit must exceed 1 (got {self.cond_limit})")
        if self.deflection_limit_ratio <= 0:
            raise ValueError("deflection_limit_ratio must be positive")
        if self.drift_direction not in (0, 1):
            raise ValueError("drift_direction must be 0 (X) or 1 (Y)")


# Global config instance
CONFIG = EngineConfig()
