"""Physical constants used throughout StageSim.

SI units unless otherwise noted. Propellant volumes are kept in
millilitres and densities in kg/mL, matching the compound catalog.
"""

# Gravitational
G_0 = 9.80665  # m/s², standard gravitational acceleration

# Time
MS_PER_S = 1000.0

# Conversion factors
KN_TO_N = 1.0e3
MN_TO_N = 1.0e6
