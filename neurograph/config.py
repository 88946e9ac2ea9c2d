"""
Core configuration constants.

These values are shared by the interaction engine, the geometry helpers and
the exporter so that what is shown on screen and what is exported agree:
- Grid and snapping parameters
- Default node geometry (footprint and display sizes)
- Export padding
- Zoom bounds and node placement jitter
"""

# Snap-to-grid unit in world units
GRID_SIZE = 10

# Edge endpoints closer than this on an axis are drawn perfectly straight
SNAP_THRESHOLD = 8

# Padding added around the bounding box of exported documents
EXPORT_PADDING = 50

# Footprint used when a node has no explicit width/height
DEFAULT_WIDTH = 140
DEFAULT_HEIGHT = 60
OPERATION_SIZE = 48

# Display sizes for terminal (input/output) nodes
TERMINAL_DEFAULT_WIDTH = 100
TERMINAL_HEIGHT = 40

# Zoom bounds for the view transform
MIN_SCALE = 0.1
MAX_SCALE = 8.0

# Random offset applied when dropping a new node at the view center
PLACEMENT_JITTER = 20

# Viewport size assumed when the canvas size is unknown
DEFAULT_VIEWPORT = (800, 600)

# Label drawn above the pending source node while connecting
TARGETING_HINT = "Targeting..."
TARGETING_HINT_OFFSET = 20
