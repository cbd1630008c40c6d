"""
neuron_sim module: render/colors.py

Central color palette.
"""

BG = (14, 14, 18)
HUD = (235, 235, 235)
LABEL = (230, 230, 230)

AXON = (70, 70, 80)
EXCITATORY_EDGE = (70, 130, 95)
INHIBITORY_EDGE = (140, 70, 80)

CONTACT = (150, 150, 165)
SENSORY = (80, 120, 230)
MOTOR = (220, 90, 90)
FIRED = (255, 235, 120)
