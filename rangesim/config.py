"""
Core Constants & Configuration Errors
=====================================
Default physical and gameplay constants shared by every module.

Callers override any of these per call through the dataclass fields of
ShotParameters / EnvironmentParameters / ShotgunPatternConfig; nothing here
is mutated at runtime.
"""


# ── Physical defaults ─────────────────────────────────────────────────────
GRAVITY              = 9.80665     # m/s²
SEA_LEVEL_DENSITY    = 1.225       # kg/m³

# ── Integrator defaults ───────────────────────────────────────────────────
DEFAULT_DT           = 0.002       # s
DEFAULT_MAX_TIME     = 5.0         # s
MAX_INTEGRATION_STEPS = 2_000_000  # hard cap regardless of max_time/dt
MAX_PATH_POINTS      = 240         # recorded trajectory samples per shot
DEFAULT_SEED         = 1

# ── Shotgun ───────────────────────────────────────────────────────────────
MAX_PELLETS          = 50

# ── Angular units ─────────────────────────────────────────────────────────
MOA_PER_MIL          = 3.4377467707849396   # 1 mil = (10800/π)/1000 MOA
MILS_PER_MOA         = 0.29088820866572157  # 1 MOA = 1000·π/10800 mil
DEFAULT_CLICK_MILS   = 0.1


class InvalidConfiguration(ValueError):
    """
    Raised when caller-supplied parameters cannot describe a real shot.

    Authoring errors in upstream level/weapon data must surface here rather
    than degrade into NaN or silently substituted defaults.
    """
