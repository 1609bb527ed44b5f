import logging

# ---------------------------------------------------------------------
# setup logger
# ---------------------------------------------------------------------

LOGGER_NAME = "norm_constraints"

LOGGER_FORMAT = \
    "%(asctime)s %(levelname)-4s %(filename)s:%(funcName)s:%(lineno)s] " \
    "%(message)s"

# ---------------------------------------------------------------------

logging.basicConfig(level=logging.INFO, format=LOGGER_FORMAT)
logging.getLogger(LOGGER_NAME).setLevel(logging.INFO)
logger = logging.getLogger(LOGGER_NAME)

# ---------------------------------------------------------------------
