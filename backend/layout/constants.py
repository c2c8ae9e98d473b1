"""
Shared layout constants for the folder canvas.
Spacing values are pitches (center to center) on their axis.
"""

# Node box width as rendered by the client
DEFAULT_NODE_W = 140

# Cross-axis pitch between adjacent nodes of a rank, by free-subgraph size tier
DEFAULT_SIBLING_SEP = 60
DEFAULT_SIBLING_SEP_MEDIUM = 80
DEFAULT_SIBLING_SEP_LARGE = 100

# Along-axis pitch between ranks: node width + rank gap (40 / 60 / 80)
DEFAULT_RANK_SEP = 180
DEFAULT_RANK_SEP_MEDIUM = 200
DEFAULT_RANK_SEP_LARGE = 220

# Free-subgraph size above which the medium / large tiers apply
MEDIUM_TREE_THRESHOLD = 20
LARGE_TREE_THRESHOLD = 50

# Local fan-out: children placed node width + 80 away from the parent, 60 apart
DEFAULT_FANOUT_OFFSET = DEFAULT_NODE_W + 80
DEFAULT_FANOUT_SEP = 60

# Stacking detector grid
STACK_CELL_SIZE = 50
STACK_RATIO = 0.5

# Drag commit threshold (canvas units) and timings (seconds)
DRAG_EPSILON = 0.5
SETTLE_DELAY = 0.2
VIEWPORT_DEBOUNCE = 0.1

# Area bounds padding around member nodes
AREA_PADDING = 20
# Area size beyond the member span: room for the last node box plus padding
AREA_EXTRA_WIDTH = 240
AREA_EXTRA_HEIGHT = 120
