"""Project-wide defaults for the simulators."""

LORENZ_SIGMA = 10.0
LORENZ_RHO = 28.0
LORENZ_BETA = 8.0 / 3.0
LORENZ_SEED = (1.0, 1.0, 1.0)
LORENZ_BASE_DT = 0.01
LORENZ_SPEED = 1.0
LORENZ_TRAIL = 2000  # UI range 500..5000

BRUSSELATOR_A = 2.0
BRUSSELATOR_B = 5.0
BRUSSELATOR_K = 1.0  # k1..k4
BRUSSELATOR_SEED = (1.0, 1.0)
BRUSSELATOR_DT = 0.01
BRUSSELATOR_CAPACITY = 1000

LOGISTIC_GROWTH_RATE = 3.8
LOGISTIC_CAPACITY = 1000.0
LOGISTIC_INITIAL = 2.0
LOGISTIC_YEARS = 50
LOGISTIC_HISTORY = 1000

BIFURCATION_MIN_RATE = 2.0
BIFURCATION_MAX_RATE = 4.0
BIFURCATION_CAPACITY = 1000.0
BIFURCATION_INITIAL = 100.0
BIFURCATION_SETTLE = 1000
BIFURCATION_SAMPLE = 100
BIFURCATION_RESOLUTION = 1000

POPULATION_DIGITS = 2
GROWTH_RATE_DIGITS = 3

DEFAULT_TICKS = 1000
ENCODING = "utf-8"
