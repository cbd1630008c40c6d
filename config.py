"""
Simulation tuning knobs.
"""

# Potentials
RESTING_POTENTIAL = 0.0
POST_FIRING_POTENTIAL = 0.0
MIN_ACCUMULATED_POTENTIAL = -10.0
LEAK_RATE = 0.2  # fraction of ap lost per detect call without firing

# Baseline neuron parameters
BASE_THRESHOLD_POTENTIAL = 1.0
BASE_SYNAPTIC_WEIGHT = 0.5
BASE_SYNAPTIC_STRENGTH_THRESHOLD = 0.1
BASE_PLASTICITY_RATE = 0.1
BASE_ABSOLUTE_REFRACTORY_PERIOD = 2
BASE_RELATIVE_REFRACTORY_PERIOD = 2

# Refractoriness
RELATIVE_REFRACTORY_SCALE = 1.0  # tp is scaled by up to (1 + this) right after arp

# Firing rate
FIRING_RATE_SMOOTHING = 0.1

# Neurotransmitter
BASE_SIGNAL = 1.0
BASE_NEUROTRANSMITTER = 1.0
NEUROTRANSMITTER_DEPLETION = 0.1
NEUROTRANSMITTER_RECOVERY = 0.2

# Plasticity
MAX_SYNAPTIC_WEIGHT = 1.0
PLASTICITY_WINDOW = 3  # ticks after a presynaptic spike that count as causal
LTP_INCREMENT = 0.1
LTD_INCREMENT = 0.1
MAX_PLASTICITY_PRESSURE = 1.0
PLASTICITY_DECAY = 0.5

# Pruning
PRUNE_INTERVAL = 1  # ticks between network-wide prune sweeps

# Signal delay
SIGNAL_DELAY_PER_UNIT = 0.0  # ticks per unit of axon-to-soma distance

# Connection policy
STRICT_CONNECTIONS = False

# Demo population
NEURON_COUNT = 48
SENSORY_FRACTION = 0.2
MOTOR_FRACTION = 0.15
INHIBITORY_FRACTION = 0.2
CONNECTION_PROBABILITY = 0.08
STIMULUS_PROBABILITY = 0.3
STIMULUS_RANGE = (0.4, 1.6)

# Runtime pacing
SIM_SPEED = 1  # ticks per rendered frame
FPS = 20

# Environment
SCREEN_W, SCREEN_H = 980, 720
WORLD_DEPTH = 200.0

# Logging
LOG_LEVEL = "INFO"
