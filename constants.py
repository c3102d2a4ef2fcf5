# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They are fundamental to the application's framework, such as rendering
properties, camera setup, or fixed physics coefficients that are not
part of the tunable configuration.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (1500x800 plus the panel).
FULLSCREEN = False
WINDOW_WIDTH = 1500
WINDOW_HEIGHT = 800
UI_PANEL_WIDTH = 300
FPS = 60

# Alpha for the UI panel background
UI_BACKGROUND_ALPHA = 100

# --- Camera ---
CAMERA_FOV = 75.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 1000.0
CAMERA_DISTANCE = 10.0

# Point sprite scale: on-screen diameter is size * POINT_SCALE / depth.
POINT_SCALE = 350.0

# --- Bloom approximation ---
# Downscale factor of the blur buffer at bloom_radius == 1.
BLOOM_BASE_DOWNSCALE = 8

# --- Fixed tick coefficients ---
# Applied every tick regardless of the configurable `damping` tunable.
VELOCITY_DAMPING = 0.98
SIZE_RELAXATION = 0.1
STALL_SPEED_SQ = 1e-5
STALL_JITTER = 0.0005
AMBIENT_JITTER = 0.0005
CURL_SCALE = 0.4
CURL_STRENGTH = 0.0003
OCCASIONAL_JITTER_CHANCE = 0.003

# Smallest length treated as a valid direction.
EPSILON = 1e-9
