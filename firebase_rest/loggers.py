import structlog

FIREBASE_LOGGER = "firebase_rest"


def get_firebase_logger() -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(FIREBASE_LOGGER)
