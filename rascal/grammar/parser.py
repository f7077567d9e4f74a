"""Recursive-descent parser for the rascal language. Consumes the Lexer's tokens and produces a syntax tree rooted at a
Block holding the program's top-level statements.

Grammar:

```
<program>     ::= (<statement> (";" <statement>)* ";"?)?     ; an empty program is allowed
<block>       ::= "{" <statements> "}" | "begin" <statements> "end"
<statements>  ::= <statement> (";" <statement>)* ";"?         ; at least one statement (empty blocks are an error)

<statement>   ::= ("let" | "var" | "mut") <identifier> "=" <expr>
                | "fn" <identifier> "=" <params> <block>     ; same as: let <identifier> = fn <params> <block>
                | <identifier> "=" <expr>
                | "return" <expr>
                | "while" <expr> <block>
                | <expr>

<expr>        ::= <unary> (<binary_op> <unary>)*             ; precedence climbing, see PRECEDENCE
<unary>       ::= ("-" | "+") <unary> | <postfix>
<postfix>     ::= <primary> ("(" (<expr> ("," <expr>)*)? ")")*  ; f(x)(y) = Call(Call(f, [x]), [y])
<primary>     ::= <integer> | <boolean> | <identifier> | "(" <expr> ")" | <block>
                | "fn" <params> <block>
                | <if>
<if>          ::= "if" <expr> <block> ("else" (<block> | <if>))?
                | "if" <expr> "begin" <statements> ("else" <statements>)? "end"
<params>      ::= "[" (<identifier> ("," <identifier>)*)? "]"
```

Binary operators bind, tightest to loosest: `* / %` > `+ -` > `== != > <` > `and or`, all left-associative. The parser
makes no promise about whether `and`/`or` short-circuit: that is up to the Evaluator.
"""

from collections import deque

from rascal.grammar.lexical import Kind, Lexer
from rascal.grammar.syntax import (Assignment, BinaryOp, Block, Call, Declaration, FunctionLiteral, Identifier, If,
                                   Literal, Return, UnaryOp, While)
from rascal.lang.error import ParseError


class Parser:
    """Parses a single program. Not reusable: create a new Parser per source."""
    PRECEDENCE = {
        "*": 4, "/": 4, "%": 4,
        "+": 3, "-": 3,
        "==": 2, "!=": 2, ">": 2, "<": 2,
        "and": 1, "or": 1
    }
    ALIASES = {"&&": "and", "||": "or"}
    UNARY = ("-", "+")
    DECLARATIONS = {"let": False, "var": True, "mut": True}  # keyword: whether or not the binding is mutable
    BLOCKS = {"{": "}", "begin": "end"}  # opening: closing delimiter

    def __init__(self, tokens):
        """tokens can be any iterable of Tokens ending with an EOF token (usually a Lexer)."""
        self.tokens = iter(tokens)
        self._buffer = deque()

    @classmethod
    def from_source(cls, source):
        return cls(Lexer(source))

    def parse(self):
        """Parses the whole token sequence into a Block of top-level statements."""
        start = self._peek()
        if start.kind is Kind.EOF:
            return Block((), position=start.position)

        statements = self._statements(closers=())
        token = self._peek()
        if token.kind is not Kind.EOF:
            raise ParseError.unexpected("';' or end of input", token)

        return Block(statements, position=start.position)

    # token stream helpers

    def _peek(self, ahead=0):
        """Returns the token ahead positions after the current one without consuming anything."""
        while len(self._buffer) <= ahead:
            if self._buffer and self._buffer[-1].kind is Kind.EOF:
                return self._buffer[-1]
            self._buffer.append(next(self.tokens))
        return self._buffer[ahead]

    def _advance(self):
        token = self._peek()
        if token.kind is not Kind.EOF:
            self._buffer.popleft()
        return token

    def _check(self, kind, *texts):
        return self._peek().matches(kind, *texts)

    def _accept(self, kind, *texts):
        """Consumes and returns the current token if it matches, otherwise returns None."""
        if self._check(kind, *texts):
            return self._advance()
        return None

    def _expect(self, kind, text=None):
        """Consumes the current token, raising a ParseError if it isn't of kind (and spelled text, if given)."""
        texts = (text,) if text is not None else ()
        if not self._check(kind, *texts):
            raise ParseError.unexpected(f"'{text}'" if text is not None else kind.value, self._peek())
        return self._advance()

    def _check_closer(self, closers):
        token = self._peek()
        return token.kind is Kind.EOF or (token.kind in (Kind.PUNCTUATION, Kind.KEYWORD) and token.text in closers)

    # statements

    def _statements(self, closers):
        """Parses a semicolon-separated list of statements, stopping before any token in closers (or EOF). A trailing
        semicolon is tolerated.
        """
        if self._check_closer(closers):
            raise ParseError("block must contain at least one statement, found {}", self._peek().describe(),
                             self._peek().position)

        statements = [self._statement()]
        while self._accept(Kind.PUNCTUATION, ";"):
            if self._check_closer(closers):
                break
            statements.append(self._statement())
        return tuple(statements)

    def _block(self):
        """Parses a brace- or begin/end-delimited Block."""
        token = self._peek()
        if not token.matches(Kind.PUNCTUATION, "{") and not token.matches(Kind.KEYWORD, "begin"):
            raise ParseError.unexpected("'{' or 'begin'", token)

        self._advance()
        closer = Parser.BLOCKS[token.text]
        statements = self._statements(closers=(closer,))
        self._expect(Kind.PUNCTUATION if closer == "}" else Kind.KEYWORD, closer)
        return Block(statements, position=token.position)

    def _statement(self):
        token = self._peek()

        if token.matches(Kind.KEYWORD, *Parser.DECLARATIONS):
            self._advance()
            name = self._expect(Kind.IDENTIFIER).text
            self._expect(Kind.OPERATOR, "=")
            return Declaration(name, Parser.DECLARATIONS[token.text], self._expr(), position=token.position)

        elif token.matches(Kind.KEYWORD, "fn") and self._peek(1).kind is Kind.IDENTIFIER:
            self._advance()
            name = self._advance().text
            self._expect(Kind.OPERATOR, "=")
            function = self._function(token)
            return Declaration(name, False, function, position=token.position)

        elif token.kind is Kind.IDENTIFIER and self._peek(1).matches(Kind.OPERATOR, "="):
            self._advance()
            self._advance()
            return Assignment(token.text, self._expr(), position=token.position)

        elif token.matches(Kind.KEYWORD, "return"):
            self._advance()
            return Return(self._expr(), position=token.position)

        elif token.matches(Kind.KEYWORD, "while"):
            self._advance()
            condition = self._expr()
            return While(condition, self._block(), position=token.position)

        return self._expr()

    # expressions

    def _binary_operator(self):
        """Returns the (normalized) binary operator at the current token, or None if there isn't one."""
        token = self._peek()
        if token.kind is Kind.OPERATOR:
            operator = Parser.ALIASES.get(token.text, token.text)
        elif token.matches(Kind.KEYWORD, "and", "or"):
            operator = token.text
        else:
            return None
        return operator if operator in Parser.PRECEDENCE else None

    def _expr(self, min_precedence=1):
        """Precedence climbing: parses operators binding at least as tight as min_precedence."""
        left = self._unary()

        while True:
            operator = self._binary_operator()
            if operator is None or Parser.PRECEDENCE[operator] < min_precedence:
                return left

            token = self._advance()
            right = self._expr(Parser.PRECEDENCE[operator] + 1)  # + 1: left-associative
            left = BinaryOp(operator, left, right, position=token.position)

    def _unary(self):
        token = self._accept(Kind.OPERATOR, *Parser.UNARY)
        if token:
            return UnaryOp(token.text, self._unary(), position=token.position)
        return self._postfix()

    def _postfix(self):
        result = self._primary()

        while self._check(Kind.PUNCTUATION, "("):
            token = self._advance()
            args = []
            if not self._check(Kind.PUNCTUATION, ")"):
                args.append(self._expr())
                while self._accept(Kind.PUNCTUATION, ","):
                    args.append(self._expr())
            self._expect(Kind.PUNCTUATION, ")")
            result = Call(result, tuple(args), position=token.position)

        return result

    def _primary(self):
        token = self._peek()

        if token.kind in (Kind.INTEGER, Kind.BOOLEAN):
            self._advance()
            return Literal(token.value, position=token.position)

        elif token.kind is Kind.IDENTIFIER:
            self._advance()
            return Identifier(token.text, position=token.position)

        elif token.matches(Kind.PUNCTUATION, "("):
            self._advance()
            result = self._expr()
            self._expect(Kind.PUNCTUATION, ")")
            return result

        elif token.matches(Kind.PUNCTUATION, "{") or token.matches(Kind.KEYWORD, "begin"):
            return self._block()

        elif token.matches(Kind.KEYWORD, "fn"):
            self._advance()
            return self._function(token)

        elif token.matches(Kind.KEYWORD, "if"):
            return self._if()

        raise ParseError.unexpected("expression", token)

    def _function(self, token):
        """Parses the parameter list and body of a function literal whose 'fn' token has been consumed."""
        self._expect(Kind.PUNCTUATION, "[")

        params = []
        if not self._check(Kind.PUNCTUATION, "]"):
            params.append(self._param(params))
            while self._accept(Kind.PUNCTUATION, ","):
                params.append(self._param(params))
        self._expect(Kind.PUNCTUATION, "]")

        return FunctionLiteral(tuple(params), self._block(), position=token.position)

    def _param(self, params):
        token = self._expect(Kind.IDENTIFIER)
        if token.text in params:
            raise ParseError("duplicate parameter '{}'", token.text, token.position, len(token.text))
        return token.text

    def _if(self):
        token = self._expect(Kind.KEYWORD, "if")
        condition = self._expr()

        begin = self._accept(Kind.KEYWORD, "begin")
        if begin:
            # if <cond> begin ... else ... end
            then_branch = Block(self._statements(closers=("else", "end")), position=begin.position)
            else_branch = None
            otherwise = self._accept(Kind.KEYWORD, "else")
            if otherwise:
                else_branch = Block(self._statements(closers=("end",)), position=otherwise.position)
            self._expect(Kind.KEYWORD, "end")
            return If(condition, then_branch, else_branch, position=token.position)

        then_branch = self._block()
        else_branch = None
        if self._accept(Kind.KEYWORD, "else"):
            else_branch = self._if() if self._check(Kind.KEYWORD, "if") else self._block()
        return If(condition, then_branch, else_branch, position=token.position)


def parse(source):
    """Lexes and parses source into a syntax tree."""
    return Parser.from_source(source).parse()
