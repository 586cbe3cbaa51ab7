class ErrorCodes:
    GENERIC_ERROR = "GEN_001"
    INTERNAL_SERVER_ERROR = "GEN_002"
    VALIDATION_ERROR = "VAL_001"
    INVALID_MACHINE_CONFIG = "VAL_002"
    NOT_FOUND = "RES_001"
    MACHINE_NOT_FOUND = "RES_002"
    GAME_LOGIC_ERROR = "GAME_001"
    SELECTION_ERROR = "GAME_002"
