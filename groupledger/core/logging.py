import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s : %(message)s"


def configure_logging(level: str = "INFO", echo_sql: bool = False):
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # sqlalchemy echoes through its own loggers, keep them quiet unless asked
    if not echo_sql:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
