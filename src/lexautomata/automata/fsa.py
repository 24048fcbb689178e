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


from cached_property import cached_property

# Marker constants


class Marker:
    """
    Represents a marker object.

    Markers label transitions that do not correspond to an input symbol, so
    they can never compare equal to a character read from a string.

    Example:
        >>> marker = Marker("start")
        >>> repr(marker)
        '<start>'
    """

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"<{self.name}>"


EPSILON = Marker("EPSILON")


# Graph model


class Transition:
    """
    A directed edge from ``src`` to ``dest``, labelled with an input symbol
    or with :data:`EPSILON`.

    Both endpoints belong to the same automaton. The destination is only
    referenced, never owned, so cycles in the graph need no special care.
    """

    def __init__(self, src, label, dest):
        self.src = src
        self.label = label
        self.dest = dest

    def __repr__(self):
        return f"<Transition {self.src.num} -{self.label}-> {self.dest.num}>"

    @property
    def is_epsilon(self):
        return self.label is EPSILON


class State:
    """
    A node in an automaton graph.

    States hash and compare by identity; ``num`` is only used for display
    and ordering. The ``accepting`` flag and the outgoing ``transitions``
    list are changed while a fragment is under construction and left alone
    once the owning automaton has been returned.

    Args:
        num (int): Display number of the state.
        accepting (bool, optional): Whether the state is accepting.
            Defaults to False.
    """

    def __init__(self, num, accepting=False):
        self.num = num
        self.accepting = accepting
        self.transitions = []

    def __repr__(self):
        return f"<State {self.num}{'*' if self.accepting else ''}>"

    def add_transition(self, label, dest):
        """
        Adds an outgoing transition on ``label`` to ``dest``.

        Returns:
            Transition: The new transition.
        """
        trans = Transition(self, label, dest)
        self.transitions.append(trans)
        return trans

    def add_epsilon(self, dest):
        return self.add_transition(EPSILON, dest)

    def destinations(self, label):
        """
        Returns the states reachable from this state by a single transition
        on ``label``. Epsilon transitions never match an input symbol.
        """
        return [t.dest for t in self.transitions if t.label == label]

    def epsilon_targets(self):
        return [t.dest for t in self.transitions if t.label is EPSILON]

    def labels(self):
        return {t.label for t in self.transitions if t.label is not EPSILON}


def epsilon_closure(states):
    """
    Expands a set of states by following epsilon transitions.

    The epsilon graph built from star and plus is cyclic; a state is only
    pushed onto the frontier the first time it is seen, so the expansion
    always terminates.

    Args:
        states (iterable): The states to expand.

    Returns:
        frozenset: The smallest set containing ``states`` that is closed
        under epsilon transitions.

    Example:
        >>> a, b = State(0), State(1)
        >>> _ = a.add_epsilon(b)
        >>> _ = b.add_epsilon(a)
        >>> sorted(s.num for s in epsilon_closure([a]))
        [0, 1]
    """
    closure = set(states)
    frontier = list(closure)
    while frontier:
        state = frontier.pop()
        for dest in state.epsilon_targets():
            if dest not in closure:
                closure.add(dest)
                frontier.append(dest)
    return frozenset(closure)


def move(states, label):
    """
    Returns the set of states reachable from ``states`` by exactly one
    transition on ``label`` (no epsilon expansion).
    """
    dest_states = set()
    for state in states:
        dest_states.update(state.destinations(label))
    return dest_states


# Base class


class FSA:
    """
    Finite State Automaton (FSA) base class.

    Subclasses define what a "state" is for the purposes of walking the
    automaton: the NFA walks frozensets of :class:`State` objects, the DFA
    walks single :class:`DfaState` objects. A falsy state means no further
    input can be accepted.

    Methods:
        all_states(): Returns every state in the automaton.
        start(): Returns the state the automaton is in before any input.
        next_state(state, label): Returns the state after reading a label.
        is_final(state): Checks if a state accepts.
        get_labels(state): Returns the labels leaving a state.
        accept(string): Checks if a whole string is accepted.
        generate_all(maxlen): Generates accepted strings up to a length.
    """

    def __len__(self):
        """
        Returns the number of states in the finite state automaton.
        """
        return len(self.all_states())

    def all_states(self):
        raise NotImplementedError

    def start(self):
        raise NotImplementedError

    def next_state(self, state, label):
        raise NotImplementedError

    def is_final(self, state):
        raise NotImplementedError

    def get_labels(self, state):
        raise NotImplementedError

    def accept(self, string):
        """
        Checks if a given string is accepted by the automaton.

        The whole string must be consumed; there is no prefix or substring
        matching. A symbol the automaton has no transition for is a normal
        rejection, not an error.

        Args:
            string (str): The string to check.

        Returns:
            bool: True if the string is accepted, False otherwise.
        """
        state = self.start()
        for label in string:
            state = self.next_state(state, label)
            if not state:
                return False
        return self.is_final(state)

    def generate_all(self, maxlen, state=None, sofar=""):
        """
        Generates every string of at most ``maxlen`` symbols accepted by the
        automaton, in lexicographic order.

        Args:
            maxlen (int): The maximum length of the generated strings.
            state (object, optional): The state to start from. Defaults to
                the start state.
            sofar (str, optional): The prefix consumed so far.

        Yields:
            str: An accepted string.

        Example:
            >>> from lexautomata.automata.reg import regex_to_nfa
            >>> list(regex_to_nfa("ab?").generate_all(3))
            ['a', 'ab']
        """
        state = self.start() if state is None else state
        if self.is_final(state):
            yield sofar
        if len(sofar) >= maxlen:
            return
        for label in sorted(self.get_labels(state)):
            newstate = self.next_state(state, label)
            if newstate:
                yield from self.generate_all(maxlen, newstate, sofar + label)


# Implementations


class NFA(FSA):
    """
    NFA (Non-Deterministic Finite Automaton) class.

    An NFA is a handle on a graph of :class:`State` objects: the ``initial``
    state and the single accepting ``final`` state of a Thompson fragment.
    Every state reachable from ``initial`` belongs to the automaton.

    Walking the NFA with :meth:`start` and :meth:`next_state` tracks the
    live set of states as a frozenset, which is how :meth:`accept`
    simulates the automaton against a string.

    Attributes:
        initial (State): The start state.
        final (State): The end state of the fragment.
    """

    def __init__(self, initial, final):
        self.initial = initial
        self.final = final

    def __repr__(self):
        return f"<NFA {self.initial.num} -> {self.final.num}>"

    @cached_property
    def states(self):
        """
        Every state reachable from the initial state, ordered by number.

        Cached on first access; only ask for it once the automaton is
        finished.
        """
        seen = {self.initial}
        stack = [self.initial]
        while stack:
            state = stack.pop()
            for trans in state.transitions:
                if trans.dest not in seen:
                    seen.add(trans.dest)
                    stack.append(trans.dest)
        return tuple(sorted(seen, key=lambda s: s.num))

    @cached_property
    def final_states(self):
        return frozenset(s for s in self.states if s.accepting)

    def all_states(self):
        return self.states

    def triples(self):
        """
        Generates all (source state, label, destination state) triples in
        the NFA.
        """
        for src in self.states:
            for trans in src.transitions:
                yield src, trans.label, trans.dest

    def all_labels(self):
        """
        Returns the set of input symbols used anywhere in the NFA.
        """
        return {label for _, label, _ in self.triples() if label is not EPSILON}

    def start(self):
        """
        Returns the epsilon-closure of the initial state as a frozenset.
        """
        return epsilon_closure([self.initial])

    def next_state(self, states, label):
        """
        Returns the epsilon-closure of the states reachable from ``states``
        on ``label``. The result is empty if nothing matches.
        """
        return epsilon_closure(move(states, label))

    def is_final(self, states):
        """
        Checks if any of the given states is accepting.
        """
        return any(state.accepting for state in states)

    def get_labels(self, states):
        labels = set()
        for state in states:
            labels.update(state.labels())
        return labels

    def to_dfa(self, alphabet=None):
        """
        Converts the NFA to an equivalent total DFA.

        See :func:`lexautomata.automata.subset.nfa_to_dfa`.
        """
        from lexautomata.automata.subset import nfa_to_dfa

        return nfa_to_dfa(self, alphabet)


def simulate(nfa, string):
    """
    Simulates ``nfa`` on ``string`` and returns True if the whole string is
    accepted.
    """
    return nfa.accept(string)


class DfaState:
    """
    A DFA state standing for a set of NFA states.

    Two instances are equal if and only if their defining sets of NFA states
    are equal, which is what lets subset construction reuse states it has
    already discovered. The state with the empty defining set is the dead
    state: it never accepts and only leads back to itself.

    Attributes:
        nfa_states (frozenset): The NFA states this state stands for.
        accepting (bool): True if any member NFA state is accepting.
        transitions (dict): Maps each input symbol to the next DfaState.
    """

    def __init__(self, nfa_states):
        self.nfa_states = frozenset(nfa_states)
        self.accepting = False
        self.transitions = {}

    def __eq__(self, other):
        if not isinstance(other, DfaState):
            return NotImplemented
        return self.nfa_states == other.nfa_states

    def __hash__(self):
        return hash(self.nfa_states)

    def __repr__(self):
        nums = ",".join(str(s.num) for s in sorted(self.nfa_states, key=lambda s: s.num))
        return f"<DfaState {{{nums}}}{'*' if self.accepting else ''}>"

    @property
    def is_dead(self):
        return not self.nfa_states

    def add_transition(self, label, dest):
        self.transitions[label] = dest

    def next_state(self, label):
        return self.transitions.get(label)


class DFA(FSA):
    """
    Deterministic Finite Automaton (DFA) class.

    Produced by subset construction. Every state has exactly one transition
    for every symbol of ``alphabet``; input that cannot lead to acceptance
    ends up in the dead state. A symbol outside the alphabet has no
    transition at all and the string is rejected.

    Attributes:
        initial (DfaState): The start state.
        states (tuple): Every reachable state, in discovery order.
        alphabet (frozenset): The symbols the DFA was built over.
    """

    def __init__(self, initial, states, alphabet):
        self.initial = initial
        self.states = tuple(states)
        self.alphabet = frozenset(alphabet)

    def __repr__(self):
        return f"<DFA {len(self.states)} states over {''.join(sorted(self.alphabet))!r}>"

    def all_states(self):
        return self.states

    @cached_property
    def final_states(self):
        return frozenset(s for s in self.states if s.accepting)

    @property
    def dead_state(self):
        """
        The shared dead state, or None if every state can still accept.
        """
        for state in self.states:
            if state.is_dead:
                return state
        return None

    def start(self):
        return self.initial

    def next_state(self, state, label):
        return state.next_state(label)

    def is_final(self, state):
        return state.accepting

    def get_labels(self, state):
        if state.is_dead:
            return []
        return list(state.transitions)

    def is_total(self):
        """
        Checks that every state has exactly one transition per symbol of
        the alphabet.
        """
        return all(set(state.transitions) == self.alphabet for state in self.states)
