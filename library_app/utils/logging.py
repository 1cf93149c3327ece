import logging

from flask.logging import default_handler

# attributes every LogRecord has; anything else came in through extra=
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class KeyValueFormatter(logging.Formatter):
    """Appends the ``extra=`` fields of a record as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}
        if not fields:
            return line
        pairs = " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        if record.exc_text and line.endswith(record.exc_text):
            # keep the traceback last
            head = line[: -len(record.exc_text)].rstrip("\n")
            return f"{head} {pairs}\n{record.exc_text}"
        return f"{line} {pairs}"


def configure_logging(app):
    handler = logging.StreamHandler()
    handler.setFormatter(KeyValueFormatter(app.config.get("LOG_FORMAT")))

    app.logger.removeHandler(default_handler)
    app.logger.addHandler(handler)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
