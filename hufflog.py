import sys


class Logger:
    def __init__(self):
        self.logger_id = "huffpack"
        self.verbose = False

    def set_logger_id(self, logger_id):
        self.logger_id = logger_id

    def set_verbose(self, verbose: bool):
        self.verbose = verbose

    def log(self, *args):
        print(f"[{self.logger_id}]", *args, file=sys.stderr)

    def debug(self, *args):
        if self.verbose:
            print(f"[DEBUG][{self.logger_id}]", *args, file=sys.stderr)

    def error(self, *args):
        print(f"[ERROR][{self.logger_id}]", *args, file=sys.stderr)

logger = Logger()
