from reelspin.error_codes import ErrorCodes

class AppException(Exception):
    def __init__(self, error_code, status_message, status_code, details=None):
        super().__init__(status_message)
        self.error_code = error_code
        self.status_message = status_message
        self.status_code = status_code
        self.details = details if details is not None else {}

    def to_dict(self):
        return {
            'status': False,
            'error_code': self.error_code,
            'status_message': self.status_message,
            'details': self.details
        }

class ValidationException(AppException):
    def __init__(self, status_message="Validation failed", details=None, error_code=ErrorCodes.VALIDATION_ERROR):
        super().__init__(
            error_code=error_code,
            status_message=status_message,
            status_code=422,
            details=details
        )

class NotFoundException(AppException):
    def __init__(self, status_message="Resource not found", details=None, error_code=ErrorCodes.NOT_FOUND):
        super().__init__(
            error_code=error_code,
            status_message=status_message,
            status_code=404,
            details=details
        )

class GameLogicException(AppException):
    def __init__(self, status_message="Game logic error", details=None, status_code=400, error_code=ErrorCodes.GAME_LOGIC_ERROR):
        super().__init__(
            error_code=error_code,
            status_message=status_message,
            status_code=status_code, # Can be 400 or 500
            details=details
        )

class SelectionError(GameLogicException):
    """
    A weighted draw did not resolve to a symbol index on a reel.

    Only reachable when the weight cache and the reel weights disagree, or when a
    reel has no weight at all. It signals a broken machine definition, so it is
    always a server-side failure.
    """
    def __init__(self, reel, weights, draw):
        self.reel = reel
        self.weights = list(weights)
        self.draw = draw
        joined = '|'.join(str(w) for w in self.weights)
        super().__init__(
            status_message=f"could not select a symbol in reel {reel} between {joined} using \"{draw}\"",
            details={'reel': reel, 'weights': self.weights, 'draw': draw},
            status_code=500,
            error_code=ErrorCodes.SELECTION_ERROR
        )

class InternalServerErrorException(AppException):
    def __init__(self, status_message="Internal server error", details=None):
        super().__init__(
            error_code=ErrorCodes.INTERNAL_SERVER_ERROR,
            status_message=status_message,
            status_code=500,
            details=details
        )
