DEFAULT_COORD_INDEX = "kdtree"
DEFAULT_ID_INDEX = "binsort"
LOG_PRINTOUT = True
STABLE_PARTITION = False
PRINT_TREE = False
