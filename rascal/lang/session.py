"""Session control for the rascal language: runs rascal programs, either from a .rl file or line by line from the
interactive shell, against a single root Environment.
"""

import re

from rascal import engine
from rascal.lang.error import RascalError


class Session:
    """Governs a rascal session, with control over the root scope shared by every program run in it."""
    SH_FILE = "<in>"  # interactive shell filename
    COMMENT = "#"
    OPENERS = {"(": ")", "[": "]", "{": "}"}
    BEGIN_END = re.compile(r"\b(begin|end)\b")

    def __init__(self, error_handler, path=SH_FILE, cmd_line=False, write=print):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in interactive mode

        self.environment = engine.new_environment(write)
        self.to_exec = []  # list of (source, tree) to run
        self.results = []  # values of the programs run so far

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise RascalError("'{}' could not be opened", path)

            self.add(source)

        elif not cmd_line:
            raise RascalError("'{}' is a reserved filename", Session.SH_FILE)

    @staticmethod
    def preprocess_line(line):
        """Strips a line typed in the shell of comments and surrounding whitespace. Returns the stripped line and
        whether or not it opens more groups/blocks than it closes (i.e. a line continuation is necessary).
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]
        line = line.strip()

        balance = sum(line.count(opener) - line.count(closer) for opener, closer in Session.OPENERS.items())
        for keyword in Session.BEGIN_END.findall(line):
            balance += 1 if keyword == "begin" else -1

        return line, balance > 0

    def add(self, source):
        """Parses source and queues it. Evaluation is delayed until run is called."""
        self.error_handler.register_source(self.path, source)  # in case error is raised

        tree = engine.parse(source)
        self.to_exec.append((source, tree))

        self.error_handler.remove_source(self.path)  # error was not raised

    def run(self):
        """Runs queued programs in order, appending their values to self.results. If a program fails or is
        interrupted, the root scope is restored to what it was before that program started and the error is raised.
        """
        while self.to_exec:
            source, tree = self.to_exec.pop(0)
            self.error_handler.register_source(self.path, source)

            snapshot = self.environment.snapshot()
            try:
                self.results.append(engine.execute(tree, self.environment))
            except (RascalError, KeyboardInterrupt):
                self.environment.restore(snapshot)
                self.to_exec.clear()
                raise

            self.error_handler.remove_source(self.path)

    def pop(self):
        """Removes and returns the most recent result."""
        return self.results.pop()
