from flask import jsonify, current_app


class ScoringError(Exception):
    """Base class for errors raised by the scoring services."""
    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message}
        payload.update(self.details)
        return payload


class InvalidInput(ScoringError):
    """Malformed or missing required fields."""
    status_code = 400


class DataIntegrity(ScoringError):
    """An invariant of locally held state would be (or has been) violated."""
    status_code = 409


class GameNotFound(ScoringError):
    status_code = 404


class StoreUnavailable(ScoringError):
    """The history store could not be reached or did not accept the write."""
    status_code = 503


def register_error_handlers(flask_app) -> None:
    @flask_app.errorhandler(ScoringError)
    def handle_scoring_error(exc: ScoringError):
        if exc.status_code >= 500:
            current_app.logger.error(f"[error] {type(exc).__name__}: {exc.message}")
        else:
            current_app.logger.info(f"[rejected] {type(exc).__name__}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code
