"""Handles interactive/command-line mode for the rascal interpreter. Uses cmd as backend."""

import cmd

from rascal.engine import parse
from rascal.grammar.syntax import display
from rascal.lang.values import UNIT, render


class Shell(cmd.Cmd):
    """rascal interpreter shell."""
    intro = "rascal interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def onecmd(self, line):
        """While a line continuation is pending, every line but EOF is rascal source, even if it starts with the
        name of a command.
        """
        if self._tmp_line and line != "EOF":
            return self.default(line)
        return super().onecmd(line)

    def default(self, line):
        """Executes arbitrary rascal statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + " " + line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            if not line:
                return

            self.sess.add(line)
            self.sess.run()

            if self.sess.results:
                value = self.sess.pop()
                if value is not UNIT:
                    print(render(value))

    def do_ast(self, arg):
        """Displays the syntax tree of a rascal program without running it."""
        with self.sess.error_handler:
            self.sess.error_handler.register_source(self.sess.path, arg)
            print(display(parse(arg)))
            self.sess.error_handler.remove_source(self.sess.path)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the rascal interpreter!\n\n"
              "rascal has integers, booleans, blocks, conditionals, loops and first-class functions.\n"
              "Statements are separated by ';' and a block's value is the value of its last statement.\n\n"
              "Try it out by typing 'let add = fn [x, y] { x + y }'. This binds a function to the\n"
              "immutable name 'add'. Next, try typing 'add(1, 2)'. 'var' declares a mutable name.\n"
              "Type 'ast <program>' to see how a program is parsed, or 'exit' to leave.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
