"""
Configuration for the conveyor sorting line simulation.
"""

# ============================================================================
# SIMULATION CLOCK
# ============================================================================

T_SIM = 40.0  # total simulated time (s)
DT = 0.02  # fixed time step (s)

# ============================================================================
# CONVEYOR GEOMETRY (belt-length units, metres in the reference line)
# ============================================================================

BELT_LENGTH = 1.0
SPAWN_POSITION = 0.05
EXIT_POSITION = BELT_LENGTH - 0.05
PICK_POSITION = 0.65  # sensor / diverter pick point

# ============================================================================
# OBJECTS
# ============================================================================

OBJECT_SPEED = 0.08  # belt speed (units/s)
OBJECT_RADIUS = 0.025  # display only

# Arrivals: exponential interarrival (rate λ) floored at MIN_INTERARRIVAL
SPAWN_RATE = 0.8  # objects/s
MIN_INTERARRIVAL = 0.2  # s

# ============================================================================
# SENSOR MODEL
# ============================================================================

SENSOR_RANGE = 0.06  # half-width of the detection window
FALSE_POS_RATE = 0.01  # spurious detections per second
FALSE_NEG_RATE = 0.05  # probability a visible object is missed
DETECTION_JITTER = 0.02  # std dev of the confirmation noise
CONFIRMATION_THRESHOLD = 0.05  # |jitter| must stay below this to confirm

FALSE_POSITIVE_ID = -999  # sentinel id for detections with no object

# ============================================================================
# ACTUATOR MODEL
# ============================================================================

REACTION_DELAY = 0.06  # s, arming to start of stroke
STROKE_DURATION = 0.35  # s, active push

# ============================================================================
# RUN CONTROL
# ============================================================================

RANDOM_SEED = 1234
SNAPSHOT_INTERVAL = 3  # record a snapshot every N steps
COMPACTION_INTERVAL = 500  # evict retired objects every N steps

NUM_SEEDS = 10  # number of independent runs in a batch
RANDOM_SEED_BASE = 42

# ============================================================================
# OUTPUT
# ============================================================================

OUTPUT_DIR = "outputs"
LOG_DIR = f"{OUTPUT_DIR}/logs"
PLOT_DIR = f"{OUTPUT_DIR}/plots"
REPORT_DIR = f"{OUTPUT_DIR}/reports"

# CSV event log columns
EVENT_LOG_COLUMNS = [
    "timestamp",
    "event_type",  # spawn, missed, false_negative, detection, false_positive, armed, sorted, cycle_complete
    "object_id",  # None for actuator-only events
    "position",  # object position at event time, if any
    "detail",  # free-form numeric detail (jitter, timer, ...)
]
