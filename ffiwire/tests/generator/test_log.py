"""Tests for structlog configuration."""

import json
import logging
import re

from ffiwire.generator.log import configure_logging


def describe_configure_logging():
    def enables_debug_when_verbose(expect):
        configure_logging(verbose=True)
        expect(logging.getLogger("ffiwire").level) == logging.DEBUG
        expect(logging.getLogger().level) == logging.WARNING

    def defaults_to_warnings(expect):
        configure_logging()
        expect(logging.getLogger("ffiwire").level) == logging.WARNING

    def renders_stdlib_records_as_json(expect, capfd):
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("ffiwire.generator.test").debug("rendered %d enums", 3)

        parsed = json.loads(capfd.readouterr().err.strip())
        expect(parsed["event"]) == "rendered 3 enums"
        expect(parsed["level"]) == "debug"
        expect(parsed["logger"]) == "ffiwire.generator.test"
        expect("timestamp" in parsed) == True

    def omits_timestamps_from_console_output(expect, capfd):
        configure_logging(verbose=True)
        logging.getLogger("ffiwire.generator.test").warning("clash in %s", "Status")

        err = capfd.readouterr().err
        expect("clash in Status" in err) == True
        expect(re.search(r"\d{4}-\d{2}-\d{2}T", err)) == None

    def keeps_parser_logging_quiet(expect):
        configure_logging(verbose=True)
        expect(logging.getLogger("lark").level) == logging.WARNING
