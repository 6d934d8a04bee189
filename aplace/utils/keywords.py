# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Keywords for JSON/YAML files and dictionary keys
"""


class KW:
    """Class to store the keywords used in JSON/YAML files"""

    CELLS = "Cells"  # Cells of the circuit
    NETS = "Nets"  # Nets of the circuit
    SYM_GROUPS = "SymGroups"  # Symmetry groups
    SIGNAL_PATHS = "SignalPaths"  # Critical signal paths (ordered lists of pins)
    PARAMETERS = "Parameters"  # Placement parameters

    WIDTH = "width"  # Width of a cell
    HEIGHT = "height"  # Height of a cell
    ORIGIN = "origin"  # Lower-left corner of the cell bounding box (cell frame)
    LOCATION = "location"  # Location of the cell origin in the layout
    PINS = "pins"  # Pins of a cell or of a net
    WEIGHT = "weight"  # Weight of a net
    PAIRS = "pairs"  # Symmetric pairs of a symmetry group
    SELF = "self"  # Self-symmetric cells of a symmetry group

    BOUNDARY = "boundary"  # Boundary box [xlo, ylo, xhi, yhi]
    MAX_WHITE_SPACE = "max_white_space"  # Tolerated white space ratio
    LAYOUT_OFFSET = "layout_offset"  # Offset added to the solved coordinates
    SCALE = "scale"  # Ratio between optimizer units and database units

    PIN_SEPARATOR = "."  # Separator between cell and pin names (e.g. M1.D)

    # Configuration of the placer
    ALPHA = "alpha"
    WEIGHTS = "weights"
    MAX_ITER = "max_iter"
    STEP = "step"
    STEP_SIZE = "step_size"
    EXECUTION = "execution"
    NUM_WORKERS = "num_workers"
    SHARED_SYM_AXIS = "shared_sym_axis"
    INIT = "init"
    SEED = "seed"
    SIGMA_RATIO = "sigma_ratio"
    CONVERGENCE_TOL = "convergence_tol"
    TIME_LIMIT = "time_limit"
    PENALTY_GROWTH = "penalty_growth"
    PENALTY_THRESHOLDS = "penalty_thresholds"
    MAX_PENALTY_WEIGHT = "max_penalty_weight"
