# Copyright 2014 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.


from loguru import logger

from lexautomata.automata.fsa import NFA, State

# Operator characters
UNION = "|"
STAR = "*"
PLUS = "+"
QUEST = "?"
LPAREN = "("
RPAREN = ")"
# Explicit concatenation marker, inserted where operands are juxtaposed
CONCAT = "·"

# Operator precedence
PRECEDENCE = {UNION: 1, CONCAT: 2, STAR: 3, QUEST: 3, PLUS: 4}
UNARY = (STAR, PLUS, QUEST)
BINARY = (UNION, CONCAT)
OPERATORS = frozenset(UNARY + BINARY + (LPAREN, RPAREN))


class RegexError(Exception):
    """Base class for errors raised while compiling a regular expression."""


class MalformedRegexError(RegexError):
    """
    Raised when a regular expression has unbalanced parentheses, an operator
    without enough operands, or operands left over with no operator joining
    them (including the empty expression).
    """


class UnknownOperatorError(RegexError):
    """
    Raised when a postfix expression contains a token that is neither an
    operand nor one of the regex operators.
    """


def is_operand(char):
    return char not in OPERATORS


def _ends_operand(char):
    # Something a following operand could be concatenated onto
    return is_operand(char) or char in UNARY or char == RPAREN


def _starts_operand(char):
    return is_operand(char) or char == LPAREN


def insert_concatenation(regex):
    """
    Makes implicit concatenation explicit by inserting :data:`CONCAT`
    between every pair of adjacent characters that are joined without an
    operator.

    A marker goes between positions i and i+1 when i is an operand, a
    postfix operator (``*``, ``+``, ``?``) or ``)``, and i+1 is an operand
    or ``(``.

    Args:
        regex (str): The infix regular expression.

    Returns:
        str: The regular expression with explicit concatenation markers.

    Example:
        >>> insert_concatenation("a(b|c)*d")
        'a·(b|c)*·d'
    """
    output = []
    for i, char in enumerate(regex):
        output.append(char)
        if i + 1 < len(regex) and _ends_operand(char) and _starts_operand(regex[i + 1]):
            output.append(CONCAT)
    return "".join(output)


def to_postfix(regex):
    """
    Converts an infix regular expression to postfix notation using the
    shunting-yard algorithm.

    Implicit concatenation is made explicit first, so the result contains
    :data:`CONCAT` markers. Operators are left associative: an incoming
    operator first moves every stacked operator of greater or equal
    precedence to the output. Parentheses group sub-expressions and never
    appear in the output.

    Args:
        regex (str): The infix regular expression.

    Returns:
        str: The postfix form.

    Raises:
        MalformedRegexError: If the parentheses are unbalanced.

    Example:
        >>> to_postfix("a*b|c")
        'a*b·c|'
    """
    output = []
    stack = []
    for char in insert_concatenation(regex):
        if is_operand(char):
            output.append(char)
        elif char == LPAREN:
            stack.append(char)
        elif char == RPAREN:
            while stack and stack[-1] != LPAREN:
                output.append(stack.pop())
            if not stack:
                raise MalformedRegexError(f"Unbalanced ')' in {regex!r}")
            stack.pop()
        else:
            prec = PRECEDENCE[char]
            while stack and stack[-1] != LPAREN and PRECEDENCE[stack[-1]] >= prec:
                output.append(stack.pop())
            stack.append(char)

    while stack:
        op = stack.pop()
        if op == LPAREN:
            raise MalformedRegexError(f"Unclosed '(' in {regex!r}")
        output.append(op)

    postfix = "".join(output)
    logger.debug("Postfix form of {!r} is {!r}", regex, postfix)
    return postfix


class RegexBuilder:
    """
    Builds NFA fragments using Thompson's construction.

    Each method returns a new :class:`NFA` fragment with exactly one
    accepting state, its ``final`` state. Composing fragments reuses their
    states instead of copying them: the end states of the operands are
    linked into the new fragment with epsilon transitions and lose their
    accepting flag. A fragment passed to a method must not be used again
    afterwards.

    Usage:
    rb = RegexBuilder()
    nfa = rb.char('a')  # Create an NFA for the character 'a'
    nfa2 = rb.concat(nfa, rb.char('b'))  # Concatenate two NFAs
    """

    def __init__(self):
        self.statenum = 0

    def new_state(self, accepting=False):
        """
        Creates a state with the next free number.
        """
        state = State(self.statenum, accepting)
        self.statenum += 1
        return state

    def char(self, label):
        """
        Create an NFA that matches a single symbol.

        Args:
        label (str): The symbol.

        Returns:
        NFA: Two states joined by a transition on ``label``.
        """
        s = self.new_state()
        e = self.new_state(accepting=True)
        s.add_transition(label, e)
        return NFA(s, e)

    def concat(self, n1, n2):
        """
        Create an NFA that matches ``n1`` followed by ``n2``.
        """
        n1.final.add_epsilon(n2.initial)
        n1.final.accepting = False
        return NFA(n1.initial, n2.final)

    def choice(self, n1, n2):
        """
        Create an NFA for the choice (|) operator.

        Args:
        n1 (NFA): The first NFA.
        n2 (NFA): The second NFA.

        Returns:
        NFA: An NFA that matches either operand.
        """
        s = self.new_state()
        e = self.new_state(accepting=True)
        for n in (n1, n2):
            s.add_epsilon(n.initial)
            n.final.add_epsilon(e)
            n.final.accepting = False
        return NFA(s, e)

    def _repeat(self, n, zero, many):
        s = self.new_state()
        e = self.new_state(accepting=True)
        s.add_epsilon(n.initial)
        if zero:
            s.add_epsilon(e)
        if many:
            n.final.add_epsilon(n.initial)
        n.final.add_epsilon(e)
        n.final.accepting = False
        return NFA(s, e)

    def star(self, n):
        """
        Create an NFA for the Kleene star (*) operator: zero or more
        repetitions of ``n``.
        """
        return self._repeat(n, zero=True, many=True)

    def plus(self, n):
        """
        Create an NFA for the plus (+) operator: one or more repetitions of
        ``n``.
        """
        return self._repeat(n, zero=False, many=True)

    def question(self, n):
        """
        Create an NFA for the question mark (?) operator: ``n`` or nothing.
        """
        return self._repeat(n, zero=True, many=False)


def _pop(stack, token, pos):
    if not stack:
        raise MalformedRegexError(
            f"Operator {token!r} at position {pos} is missing an operand"
        )
    return stack.pop()


def build_nfa_from_postfix(postfix, builder=None):
    """
    Builds an NFA from a postfix regular expression with Thompson's
    construction.

    Operands push a one-symbol fragment onto a stack. Each operator pops its
    operands (for binary operators the right-hand operand comes off first),
    combines them and pushes the result. Exactly one fragment must be left
    at the end.

    Args:
        postfix (str): The postfix expression, as returned by
            :func:`to_postfix`.
        builder (RegexBuilder, optional): The builder to create states
            with. Defaults to a new builder.

    Returns:
        NFA: The NFA for the whole expression.

    Raises:
        UnknownOperatorError: If a token is neither an operand nor an
            operator (for example a parenthesis).
        MalformedRegexError: If an operator is missing operands, or the
            expression leaves no fragment or more than one.
    """
    builder = builder or RegexBuilder()
    unary = {STAR: builder.star, PLUS: builder.plus, QUEST: builder.question}
    binary = {UNION: builder.choice, CONCAT: builder.concat}

    stack = []
    for pos, token in enumerate(postfix):
        if is_operand(token):
            stack.append(builder.char(token))
        elif token in unary:
            n = _pop(stack, token, pos)
            stack.append(unary[token](n))
        elif token in binary:
            n2 = _pop(stack, token, pos)
            n1 = _pop(stack, token, pos)
            stack.append(binary[token](n1, n2))
        else:
            raise UnknownOperatorError(
                f"Unknown operator {token!r} at position {pos} of {postfix!r}"
            )

    if not stack:
        raise MalformedRegexError(f"No operand in {postfix!r}")
    if len(stack) > 1:
        raise MalformedRegexError(f"{len(stack)} fragments left over after {postfix!r}")

    nfa = stack.pop()
    logger.opt(lazy=True).debug(
        "Built NFA with {} states from {!r}", lambda: len(nfa), lambda: postfix
    )
    return nfa


def regex_to_nfa(pattern):
    """
    Compiles an infix regular expression into an NFA.

    Example:
        >>> nfa = regex_to_nfa("a(b|c)*")
        >>> nfa.accept("abcb")
        True
    """
    return build_nfa_from_postfix(to_postfix(pattern))
