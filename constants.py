# constants.py

"""
Application Constants

Static values for the window and renderer. The physics parameters live in
config.json instead, because they change between simulation runs.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions
WIDTH = 800  # Pixels
HEIGHT = 800  # Pixels

# Framerate
FPS = 60  # Frames per second

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

# Window Title
TITLE = "Particle Life"

# One entry per particle color index. Color counts above the palette size wrap around.
PARTICLE_PALETTE = [
    (230, 41, 55),    # Red
    (255, 161, 0),    # Orange
    (253, 249, 0),    # Yellow
    (255, 255, 255),  # White
    (135, 60, 190),   # Violet
]

PARTICLE_RADIUS = 2  # Pixels

# FPS counter
FPS_TEXT_POSITION = (10, 10)  # Pixels
FPS_TEXT_SIZE = 30  # Points
