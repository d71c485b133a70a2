"""
Localizer constants only.

=============================================================================
CONVENTION QUICK REFERENCE
=============================================================================

POSES:
  Internal 6D: [trans(3), rotvec(3)] = [x, y, z, rx, ry, rz]
  Composition pose_a * pose_b applies pose_b in the local frame of pose_a.

MOTION INCREMENT:
  [tx, ty, tz, roll, pitch, yaw], RPY with R = Rz(yaw) @ Ry(pitch) @ Rx(roll)

PARTICLE WEIGHTS:
  Weight = mean capped residual distance (meters). LOWER is a better fit.
  After normalization the largest weight is exactly 0, all others <= 0.

ELEVATION GRID:
  grid[ix][iy] = max z of points in the cell, NaN where nothing was observed.
=============================================================================
"""

# =============================================================================
# SENSOR MODEL DEFAULTS
# =============================================================================

# Maximum admissible point-to-map distance (m); larger residuals are capped.
SENSOR_D_MAX_DEFAULT = 0.5

# Voxel edge length used to sparsify incoming scans (m).
SPARSIFICATION_RESOLUTION_DEFAULT = 0.1

# Lower bound of the sparsification resolution (m).
SPARSIFICATION_RESOLUTION_MIN = 1.0e-9

# Weight assigned to a particle when no scan point could be matched.
PARTICLE_WEIGHT_MIN = 1.0e-3

# Minimum period between repeated degenerate-input warnings (s).
WARN_THROTTLE_SEC = 1.0

# =============================================================================
# ELEVATION MAP DEFAULTS
# =============================================================================

ELEVATION_RESOLUTION_DEFAULT = 0.1
ELEVATION_RESOLUTION_MIN = 1.0e-3

# =============================================================================
# MOTION MODEL DEFAULTS
# =============================================================================

# Diagonal of the default 6x6 motion covariance.
MOTION_COVARIANCE_DIAG_DEFAULT = 0.1

# Per-axis variance of the start pose [x, y, z, roll, pitch, yaw].
START_POSE_VARIANCE_DEFAULT = 0.1

# =============================================================================
# FILTER DEFAULTS
# =============================================================================

N_PARTICLES_DEFAULT = 500

# Seed sentinel: -1 draws fresh OS entropy.
RNG_SEED_RANDOM = -1
