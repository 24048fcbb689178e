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


from collections import deque

from loguru import logger

from lexautomata.automata.fsa import DFA, EPSILON, DfaState, epsilon_closure, move


def nfa_to_dfa(nfa, alphabet=None):
    """
    Converts an NFA to an equivalent DFA using subset construction.

    Each DFA state stands for the epsilon-closed set of NFA states the NFA
    can be in after reading some input. States are discovered with a FIFO
    worklist seeded with the closure of the NFA's start state; a set that
    has been seen before maps to the same DfaState.

    The transition function of the result is total over ``alphabet``. When
    no NFA state can move on a symbol, the symbol leads to the dead state
    (the DfaState for the empty set), which loops back to itself on every
    symbol.

    Args:
        nfa (NFA): The NFA to convert. It is only read.
        alphabet (iterable, optional): The input symbols. Defaults to the
            symbols used by the NFA. EPSILON is ignored if present.

    Returns:
        DFA: The converted DFA.

    Example:
        >>> from lexautomata.automata.reg import regex_to_nfa
        >>> dfa = nfa_to_dfa(regex_to_nfa("(a|b)*abb"), "ab")
        >>> dfa.accept("babb"), dfa.accept("abba")
        (True, False)
    """
    if alphabet is None:
        alphabet = nfa.all_labels()
    labels = sorted(label for label in set(alphabet) if label is not EPSILON)

    initial = DfaState(nfa.start())
    seen = {initial.nfa_states: initial}
    unmarked = deque([initial])
    while unmarked:
        current = unmarked.popleft()
        for label in labels:
            target = epsilon_closure(move(current.nfa_states, label))
            dest = seen.get(target)
            if dest is None:
                dest = seen[target] = DfaState(target)
                unmarked.append(dest)
            current.add_transition(label, dest)

    states = list(seen.values())
    for state in states:
        state.accepting = nfa.is_final(state.nfa_states)

    logger.debug(
        "Subset construction: {} NFA states -> {} DFA states over {} symbols",
        len(nfa),
        len(states),
        len(labels),
    )
    return DFA(initial, states, labels)
