import os

# ======= Worker / capacity caps =======
WORKERS          = int(os.getenv("RP_WORKERS", "1"))
MAX_BOARD_CELLS  = int(os.getenv("RP_MAX_BOARD_CELLS", "1000000"))

# ======= Backtracking budget =======
# 0 disables the limit; the search then runs to success or exhaustion.
BACKTRACK_NODE_LIMIT = int(os.getenv("RP_BACKTRACK_NODE_LIMIT", "0"))
BACKTRACK_TIME_LIMIT = float(os.getenv("RP_BACKTRACK_TIME_LIMIT", "0"))

# ======= Shortcuts / fallbacks =======
BLOCK_FILL        = int(os.getenv("RP_BLOCK_FILL", "1")) != 0
CP_SAT_FALLBACK   = int(os.getenv("RP_CP_SAT_FALLBACK", "1")) != 0
CP_SAT_TIME_LIMIT = float(os.getenv("RP_CP_SAT_TIME_LIMIT", "30"))
CP_SAT_WORKERS    = int(os.getenv("RP_CP_SAT_WORKERS", "1"))
# Run CP-SAT in a spawned child so a native crash cannot take the caller down.
CP_SAT_ISOLATE    = int(os.getenv("RP_CP_SAT_ISOLATE", "0")) != 0

# ======= Output names =======
RESULTS_OUT = os.getenv("RP_RESULTS_OUT", "results.txt")
LAYOUT_HTML = os.getenv("RP_LAYOUT_HTML", "layout_view.html")
SVG_SCALE   = int(os.getenv("RP_SVG_SCALE", "24"))


class CFG:
    WORKERS         = WORKERS
    MAX_BOARD_CELLS = MAX_BOARD_CELLS

    BACKTRACK_NODE_LIMIT = BACKTRACK_NODE_LIMIT
    BACKTRACK_TIME_LIMIT = BACKTRACK_TIME_LIMIT

    BLOCK_FILL        = BLOCK_FILL
    CP_SAT_FALLBACK   = CP_SAT_FALLBACK
    CP_SAT_TIME_LIMIT = CP_SAT_TIME_LIMIT
    CP_SAT_WORKERS    = CP_SAT_WORKERS
    CP_SAT_ISOLATE    = CP_SAT_ISOLATE

    RESULTS_OUT = RESULTS_OUT
    LAYOUT_HTML = LAYOUT_HTML
    SVG_SCALE   = SVG_SCALE


__all__ = ["CFG"]
